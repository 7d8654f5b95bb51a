"""
System checks for the clinic app.
"""
from django.core.checks import Warning, register
from django.db import connections

W001 = 'clinic.W001'


@register()
def live_slot_constraint_check(app_configs=None, databases=None, **kwargs):
    """Warn where ``uniq_live_appointment_slot`` is not enforced.

    MySQL has no partial unique indexes, so Django skips the conditional
    constraint there and only the per-doctor row lock guards bookings.
    """
    errors = []
    for alias in databases or ['default']:
        if connections[alias].vendor == 'mysql':
            errors.append(Warning(
                'uniq_live_appointment_slot is not enforced on MySQL.',
                hint='Double booking is then prevented only by the doctor row lock in commit_booking.',
                obj=alias,
                id=W001,
            ))
    return errors
