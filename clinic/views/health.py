from django.core.cache import cache
from django.db import DatabaseError, connections
from django.http import JsonResponse


def healthz(request):
    """Liveness probe: database round trip and slot cache reachability."""
    checks = {}
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        checks['db'] = bool(row and row[0] == 1)
    except DatabaseError as e:
        return JsonResponse({'ok': False, 'error': f'db: {e}'}, status=503)

    cache.set('healthz', 1, 5)
    checks['cache'] = cache.get('healthz') == 1
    return JsonResponse({'ok': all(checks.values()), **checks}, status=200 if all(checks.values()) else 503)
