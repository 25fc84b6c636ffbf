import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from django.db.models import Q

from backend.core.exceptions import StorageError, error_response
from backend.core.permissions import IsAdminRole
from backend.core.storage import announcement_bucket, delete_files, indexed_files, upload_file
from backend.core.utils import paginate, parse_json_field, run_audited, with_retry
from .models import Announcement
from .serializers import AnnouncementSerializer

logger = logging.getLogger(__name__)

IMAGE_PATH = 'images'


def _uploaded_images(request):
    """``image_0..n``, or a single ``image`` when no indexed file was sent"""
    files = indexed_files(request.FILES, 'image')
    if not files:
        single = request.FILES.get('image')
        if single is not None and single.size:
            files = [single]
    return [upload_file(f, IMAGE_PATH, announcement_bucket()) for f in files]


def _text(request, field):
    value = request.data.get(field)
    if isinstance(value, str):
        value = value.strip()
    return value or None


def _delete_announcement(request, announcement_id):
    if not announcement_id:
        return error_response('ID is required')
    announcement = Announcement.objects.filter(pk=announcement_id).first()
    if announcement is None:
        return error_response('Announcement not found', status.HTTP_404_NOT_FOUND)

    delete_files(announcement.image, announcement_bucket())
    run_audited(request.user.pk, announcement.delete)
    logger.info(f"Announcement {announcement.judul} deleted by {request.user.email}")
    return Response({'message': 'Announcement deleted successfully'})


@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAdminRole])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def announcement_list(request):
    """List (searchable, paginated), create, or delete by ``?id=``"""
    if request.method == 'GET':
        queryset = Announcement.objects.order_by('-created_at')
        search = (request.query_params.get('search') or '').strip()
        if search:
            queryset = queryset.filter(Q(judul__icontains=search) | Q(deskripsi__icontains=search))
        items, pagination = with_retry(lambda: paginate(queryset, request))
        return Response({
            'announcements': AnnouncementSerializer(items, many=True).data,
            'pagination': pagination,
        })

    if request.method == 'DELETE':
        return _delete_announcement(request, request.query_params.get('id'))

    judul = _text(request, 'judul')
    if not judul:
        return error_response('Judul is required')

    try:
        images = _uploaded_images(request)
    except StorageError as e:
        logger.error(f"Announcement image upload failed: {e}")
        return error_response('Failed to upload image', status.HTTP_500_INTERNAL_SERVER_ERROR)

    announcement = run_audited(
        request.user.pk,
        lambda: Announcement.objects.create(
            judul=judul,
            deskripsi=_text(request, 'deskripsi'),
            link=_text(request, 'link'),
            image=images,
            created_by=request.user.name,
        ),
    )
    return Response(AnnouncementSerializer(announcement).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def announcement_detail(request, pk):
    if request.method == 'DELETE':
        return _delete_announcement(request, pk)

    announcement = with_retry(lambda: Announcement.objects.filter(pk=pk).first())
    if announcement is None:
        return error_response('Announcement not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(AnnouncementSerializer(announcement).data)

    judul = _text(request, 'judul')
    if not judul:
        return error_response('Judul is required')

    removed = parse_json_field(request.data.get('removedImages'), default=[])
    if not isinstance(removed, list):
        removed = []
    delete_files(removed, announcement_bucket())
    kept = [url for url in announcement.image or [] if url not in removed]

    try:
        new_images = _uploaded_images(request)
    except StorageError as e:
        logger.error(f"Announcement image upload failed: {e}")
        return error_response('Failed to upload image', status.HTTP_500_INTERNAL_SERVER_ERROR)

    def update():
        announcement.judul = judul
        announcement.deskripsi = _text(request, 'deskripsi')
        announcement.link = _text(request, 'link')
        announcement.image = kept + new_images
        announcement.updated_by = request.user.name
        announcement.save()
        return announcement

    run_audited(request.user.pk, update)
    return Response(AnnouncementSerializer(announcement).data)
