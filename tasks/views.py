from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .checklist import Checklist
from .serializers import ChecklistSerializer, TaskNoteSerializer, ToggleTaskSerializer


def checklist_response(checklist):
    return Response(ChecklistSerializer(checklist.summary()).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def checklist_state(request):
    return checklist_response(Checklist.from_session(request.session))


@api_view(['POST'])
@permission_classes([AllowAny])
def toggle_task(request):
    serializer = ToggleTaskSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=400)

    checklist = Checklist.from_session(request.session)
    if not checklist.toggle(serializer.validated_data['task_id']):
        return Response({'error': 'Task not found'}, status=404)

    checklist.store(request.session)
    return checklist_response(checklist)


@api_view(['POST'])
@permission_classes([AllowAny])
def update_note(request):
    serializer = TaskNoteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=400)

    data = serializer.validated_data
    checklist = Checklist.from_session(request.session)
    if not checklist.set_note(data['task_id'], data['note']):
        return Response({'error': 'Task not found'}, status=404)

    checklist.store(request.session)
    return checklist_response(checklist)


@api_view(['POST'])
@permission_classes([AllowAny])
def reset_checklist(request):
    checklist = Checklist.from_session(request.session)
    checklist.reset()
    checklist.store(request.session)
    return checklist_response(checklist)
