#!/usr/bin/env python
"""
Command line entry point for the aura project.

Sets ``aura.settings`` as the default settings module and hands control
to Django's management utility, so ``python manage.py migrate``,
``seed_clinic`` and ``refresh_slots`` all run through here.
"""
import os
import sys


def main() -> None:
    """Run administrative tasks for the aura project."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'aura.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Is it installed and available on your "
            "PYTHONPATH environment variable? Did you forget to activate a "
            "virtual environment?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
