"""
Integration tests for the clinic scheduling API.

These tests exercise the request/response surface: authentication, the
``{'ok': ..., 'data'|'error': ...}`` envelopes, actor scoping and the
booking flow end to end.  The tests use Django REST Framework's
APIClient within the APITestCase base class.

To run the tests:

```
pytest -q clinic/tests
```
"""
from datetime import date, timedelta

from django.core.cache import cache
from django.urls import reverse
from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from ..models import Appointment, ScheduleOverride, User
from .helpers import add_weekly, make_branch, make_doctor, make_patient, make_user, next_weekday


class ClinicAPITests(APITestCase):
    def setUp(self) -> None:
        """Two doctors at one branch, a patient pair, front desk staff and an admin."""
        cache.clear()
        self.branch = make_branch()
        self.doctor = make_doctor('dr_wilson', self.branch)
        add_weekly(self.doctor, 1)  # Monday
        self.other_doctor = make_doctor('dr_patel', self.branch)
        self.patient = make_patient('jdoe', 'PAT-001')
        self.other_patient = make_patient('rsmith', 'PAT-002')
        self.staff = make_user('athompson', User.ROLE_STAFF)
        self.admin = make_user('smitchell', User.ROLE_ADMIN)
        self.monday = next_weekday(0)

    def tearDown(self) -> None:
        cache.clear()

    def client_for(self, user: User) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def book(self, client, start='09:00', **extra):
        body = {
            'doctorId': self.doctor.id,
            'branchId': self.branch.id,
            'date': self.monday.isoformat(),
            'startTime': start,
        }
        body.update(extra)
        return client.post(reverse('appointments'), body, format='json')

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def test_login_returns_token_and_jwt(self):
        r = self.client.post(reverse('login_view'), {'username': 'jdoe', 'password': 'P@ssw0rd1'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data['ok'])
        self.assertTrue(r.data['token'])
        self.assertTrue(r.data['jwt_access'])
        self.assertEqual(r.data['role'], User.ROLE_PATIENT)

        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
        self.assertEqual(client.get(reverse('doctor_list')).status_code, status.HTTP_200_OK)

        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
        self.assertEqual(client.get(reverse('doctor_list')).status_code, status.HTTP_200_OK)

    def test_bad_password_is_rejected(self):
        r = self.client.post(reverse('login_view'), {'username': 'jdoe', 'password': 'nope'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(r.data['ok'])

    def login(self, username='jdoe'):
        return self.client.post(reverse('login_view'), {'username': username, 'password': 'P@ssw0rd1'}, format='json')

    def test_jwt_refresh_issues_new_access_token(self):
        refresh = self.login().data['jwt_refresh']
        r = self.client.post(reverse('jwt_refresh'), {'refresh': refresh}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data['jwt_access'])
        self.assertNotIn('access', r.data)

        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
        self.assertEqual(client.get(reverse('doctor_list')).status_code, status.HTTP_200_OK)

    def test_jwt_refresh_rejects_garbage(self):
        r = self.client.post(reverse('jwt_refresh'), {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_jwt_logout_blacklists_refresh_token(self):
        tokens = self.login().data
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['jwt_access']}")

        r = client.post(reverse('jwt_logout'), {'refresh': tokens['jwt_refresh']}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data, {'ok': True, 'blacklisted': 1})

        r = self.client.post(reverse('jwt_refresh'), {'refresh': tokens['jwt_refresh']}, format='json')
        self.assertEqual(r.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_jwt_logout_without_token_blacklists_all_sessions(self):
        first = self.login().data
        second = self.login().data
        r = self.client_for(self.patient).post(reverse('jwt_logout'), {}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['blacklisted'], 2)
        for tokens in (first, second):
            r = self.client.post(reverse('jwt_refresh'), {'refresh': tokens['jwt_refresh']}, format='json')
            self.assertEqual(r.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_jwt_logout_rejects_bad_refresh(self):
        r = self.client_for(self.patient).post(reverse('jwt_logout'), {'refresh': 'nope'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['code'], 'invalid_token')

    def test_anonymous_requests_are_refused(self):
        r = self.client.get(reverse('slot_list'), {'doctorId': self.doctor.id, 'date': self.monday.isoformat()})
        self.assertIn(r.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
        self.assertFalse(r.data['ok'])

    def test_healthz(self):
        r = self.client.get(reverse('healthz'))
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.json()['ok'])

    # ------------------------------------------------------------------
    # Directory and slots
    # ------------------------------------------------------------------
    def test_doctor_directory(self):
        r = self.client_for(self.patient).get(reverse('doctor_list'), {'branchId': self.branch.id})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['pagination']['total'], 2)
        self.assertEqual({d['id'] for d in r.data['data']}, {self.doctor.id, self.other_doctor.id})

    def test_slot_listing(self):
        r = self.client_for(self.patient).get(
            reverse('slot_list'), {'doctorId': self.doctor.id, 'date': self.monday.isoformat()}
        )
        self.assertEqual(r.status_code, 200)
        data = r.data['data']
        self.assertTrue(data['available'])
        self.assertEqual(len(data['slots']), 16)
        self.assertEqual(data['slots'][0], '09:00')
        self.assertEqual(data['slots'][-1], '16:30')

    def test_leave_day_reports_reason(self):
        leave_day = date(2024, 6, 10)
        ScheduleOverride.objects.create(
            doctor=self.doctor, date=leave_day, kind=ScheduleOverride.KIND_LEAVE,
            status=ScheduleOverride.STATUS_APPROVED,
        )
        r = self.client_for(self.patient).get(
            reverse('slot_list'), {'doctorId': self.doctor.id, 'date': leave_day.isoformat()}
        )
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['data']['slots'], [])
        self.assertFalse(r.data['data']['available'])
        self.assertEqual(r.data['data']['reason'], 'leave')

    def test_slot_query_is_validated(self):
        r = self.client_for(self.patient).get(reverse('slot_list'), {'doctorId': self.doctor.id, 'date': '10/06/2024'})
        self.assertEqual(r.status_code, 400)
        self.assertFalse(r.data['ok'])

    def test_unknown_doctor_slots_is_404(self):
        r = self.client_for(self.patient).get(
            reverse('slot_list'), {'doctorId': self.doctor.id + 100, 'date': self.monday.isoformat()}
        )
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.data['error']['code'], 'not_found')

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------
    def test_patient_books_and_slot_disappears(self):
        client = self.client_for(self.patient)
        r = self.book(client, reason='Regular heart checkup')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['data']['status'], Appointment.STATUS_PENDING)
        self.assertEqual(r.data['data']['patientId'], self.patient.id)
        self.assertTrue(r.data['data']['confirmationNumber'].startswith('APP-'))

        slots = client.get(reverse('slot_list'), {'doctorId': self.doctor.id, 'date': self.monday.isoformat()})
        self.assertNotIn('09:00', slots.data['data']['slots'])
        self.assertEqual(len(slots.data['data']['slots']), 15)

    def test_double_booking_is_409(self):
        self.book(self.client_for(self.patient))
        r = self.book(self.client_for(self.other_patient))
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r.data, {'ok': False, 'error': {'code': 'slot_unavailable', 'message': r.data['error']['message']}})

    def test_patient_cannot_book_for_others(self):
        r = self.book(self.client_for(self.patient), patientId=self.other_patient.id)
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(r.data['error']['code'], 'forbidden')

    def test_staff_must_name_the_patient(self):
        client = self.client_for(self.staff)
        r = self.book(client)
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data['error']['code'], 'invalid_booking')
        r = self.book(client, patientId=self.patient.id)
        self.assertEqual(r.status_code, 201)

    def test_past_date_is_400(self):
        past = self.monday - timedelta(days=14)
        r = self.book(self.client_for(self.patient), date=past.isoformat())
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data['error']['code'], 'invalid_booking')

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------
    def test_list_is_scoped(self):
        self.book(self.client_for(self.patient), start='09:00')
        self.book(self.client_for(self.other_patient), start='09:30')

        mine = self.client_for(self.patient).get(reverse('appointments'))
        self.assertEqual(mine.data['pagination']['total'], 1)
        everyone = self.client_for(self.staff).get(reverse('appointments'))
        self.assertEqual(everyone.data['pagination']['total'], 2)
        nobody = self.client_for(self.other_doctor.user).get(reverse('appointments'))
        self.assertEqual(nobody.data['pagination']['total'], 0)

    def test_detail_and_status_flow(self):
        appt_id = self.book(self.client_for(self.patient)).data['data']['id']

        r = self.client_for(self.other_patient).get(reverse('appointment_detail', args=[appt_id]))
        self.assertEqual(r.status_code, 404)

        doctor = self.client_for(self.doctor.user)
        r = doctor.post(reverse('appointment_status', args=[appt_id]), {'status': 'CONFIRMED'}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['data']['status'], 'CONFIRMED')

        r = doctor.post(reverse('appointment_status', args=[appt_id]), {'status': 'PENDING'}, format='json')
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.data['error']['code'], 'invalid_transition')

        patient = self.client_for(self.patient)
        r = patient.post(reverse('appointment_status', args=[appt_id]), {'status': 'COMPLETED'}, format='json')
        self.assertEqual(r.status_code, 403)
        r = patient.post(reverse('appointment_status', args=[appt_id]), {'status': 'CANCELLED'}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(patient.get(reverse('appointment_detail', args=[appt_id])).data['data']['status'], 'CANCELLED')

    def test_export_csv(self):
        self.book(self.client_for(self.patient))
        r = self.client_for(self.staff).get(reverse('appointment_export'))
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r['Content-Type'].startswith('text/csv'))
        lines = r.content.decode().strip().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith('confirmationNumber,'))

        r = self.client_for(self.patient).get(reverse('appointment_export'))
        self.assertEqual(r.status_code, 403)

    # ------------------------------------------------------------------
    # Schedules and overrides
    # ------------------------------------------------------------------
    def test_weekly_schedule_upsert(self):
        url = reverse('doctor_schedule', args=[self.doctor.id])
        r = self.client_for(self.doctor.user).post(
            url, {'dayOfWeek': 2, 'startTime': '10:00', 'endTime': '12:00', 'isActive': True}, format='json'
        )
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['data']['startTime'], '10:00')

        r = self.client_for(self.other_doctor.user).post(url, {'dayOfWeek': 2, 'isActive': False}, format='json')
        self.assertEqual(r.status_code, 403)

        r = self.client_for(self.patient).get(url)
        self.assertEqual(sorted(e['dayOfWeek'] for e in r.data['data']['weekly']), [1, 2])

    def test_override_request_and_review(self):
        r = self.client_for(self.doctor.user).post(
            reverse('overrides'), {'date': self.monday.isoformat(), 'kind': 'LEAVE', 'reason': 'Conference'},
            format='json',
        )
        self.assertEqual(r.status_code, 201)
        override_id = r.data['data']['id']
        self.assertEqual(r.data['data']['status'], 'PENDING')

        review_url = reverse('override_review', args=[override_id])
        r = self.client_for(self.doctor.user).post(review_url, {'status': 'APPROVED'}, format='json')
        self.assertEqual(r.status_code, 403)

        r = self.client_for(self.admin).post(review_url, {'status': 'APPROVED'}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['data']['status'], 'APPROVED')

        slots = self.client_for(self.patient).get(
            reverse('slot_list'), {'doctorId': self.doctor.id, 'date': self.monday.isoformat()}
        )
        self.assertEqual(slots.data['data']['reason'], 'leave')

        pending = self.client_for(self.admin).get(reverse('overrides'), {'status': 'PENDING'})
        self.assertEqual(pending.data['data'], [])
