from django.conf import settings
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from authentication.session import identity_from_request
from tasks.checklist import Checklist
from .backends import get_data_backend
from .exceptions import BackendError, SubmissionFailed, Unauthenticated
from .serializers import ReportSerializer, ReportSubmitSerializer, ReportTaskSerializer
from .submission import ReportSubmission


@api_view(['POST'])
@permission_classes([AllowAny])
def submit_report(request):
    serializer = ReportSubmitSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=400)

    submission = ReportSubmission(
        get_data_backend(),
        Checklist.from_session(request.session),
        compensate=settings.CHECKLIST.get('COMPENSATE_ORPHANED_REPORTS', True),
    )
    try:
        report = submission.submit(identity_from_request(request), serializer.to_draft())
    except Unauthenticated as e:
        return Response({'error': str(e)}, status=401)
    except SubmissionFailed as e:
        return Response({
            'error': 'Failed to save report',
            'detail': str(e.cause or e),
            'report_id': e.report_id,
            'compensated': e.compensated,
        }, status=502)

    data = ReportSerializer(report).data
    data['tasks'] = ReportTaskSerializer(submission.tasks, many=True).data
    return Response(data, status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_reports(request):
    identity = identity_from_request(request)
    try:
        reports = get_data_backend().list_reports(user_id=identity.user_id)
    except BackendError as e:
        return Response({'error': str(e)}, status=502)
    return Response(ReportSerializer(reports, many=True).data)
