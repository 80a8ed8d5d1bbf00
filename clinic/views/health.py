from django.db import DatabaseError, connections
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
import logging

logger = logging.getLogger(__name__)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def healthz(request):
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
    except DatabaseError as e:
        logger.error('health check failed: %s', e)
        return Response({'success': False, 'message': 'Database unavailable', 'data': {'db': False}}, status=500)
    return Response({'success': True, 'message': 'ok', 'data': {'db': bool(row and row[0] == 1)}})
