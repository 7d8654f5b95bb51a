from typing import Optional

from django.db.models import Q

from clinic.models import DoctorProfile


def list_doctors(*, branch_id: Optional[int] = None, q: Optional[str] = None,
                 page: Optional[int] = None, page_size: Optional[int] = None) -> tuple[list[dict], int]:
    qs = DoctorProfile.objects.select_related('user', 'branch').filter(user__is_active=True)
    if branch_id:
        qs = qs.filter(branch_id=branch_id)
    if q:
        qs = qs.filter(
            Q(user__first_name__icontains=q)
            | Q(user__last_name__icontains=q)
            | Q(user__username__icontains=q)
            | Q(specialization__icontains=q)
        )

    qs = qs.order_by('id')
    total = qs.count()
    if page and page_size:
        start = (page-1)*page_size
        end = start + page_size
        qs = qs[start:end]

    data = [{
        'id': d.id,
        'userId': d.user_id,
        'name': (d.user.get_full_name() or d.user.username),
        'specialization': d.specialization,
        'consultationFee': str(d.consultation_fee),
        'slotDurationMinutes': d.slot_duration_minutes,
        'branchId': d.branch_id,
        'branchName': d.branch.name,
    } for d in qs]
    return data, total
