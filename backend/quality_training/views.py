import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.db.models import Prefetch

from backend.core.exceptions import error_response
from backend.core.permissions import IsAdminRole
from backend.core.utils import get_user_label, request_payload, run_audited, with_retry
from .models import (
    QualityTraining, JenisQualityTraining, DetailQualityTraining, SubdetailQualityTraining,
)
from .serializers import (
    QualityTrainingSerializer, JenisQualityTrainingSerializer, DetailWithJenisSerializer,
)

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = 'Not found'
DELETED_MESSAGE = 'Deleted'


def _jenis_queryset():
    return JenisQualityTraining.objects.select_related('quality_training').prefetch_related(
        Prefetch(
            'detail_quality_trainings',
            queryset=DetailQualityTraining.objects.prefetch_related('subdetail_quality_trainings'),
        )
    )


def _detail_queryset():
    return DetailQualityTraining.objects.select_related('jenis_quality_training').prefetch_related(
        'subdetail_quality_trainings'
    )


def _create_detail_tree(jenis, details, author):
    """Create detail rows and their subdetails under ``jenis``"""
    for detail in details or []:
        if not isinstance(detail, dict) or not detail.get('name'):
            continue
        created = DetailQualityTraining.objects.create(
            jenis_quality_training=jenis,
            name=detail['name'],
            description=detail.get('description'),
            linkslide=detail.get('linkslide'),
            logos=detail.get('logos') or [],
            created_by=author,
            updated_by=detail.get('updated_by'),
            update_notes=detail.get('update_notes'),
        )
        for sub in detail.get('subdetails') or []:
            if not isinstance(sub, dict) or not sub.get('name'):
                continue
            SubdetailQualityTraining.objects.create(
                detail_quality_training=created,
                name=sub['name'],
                description=sub.get('description'),
                logos=sub.get('logos') or [],
                created_by=author,
                updated_by=sub.get('updated_by'),
                update_notes=sub.get('update_notes'),
            )


# Quality training views
@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def quality_training_list_create(request):
    """List quality trainings with their jenis, or create one"""
    if request.method == 'GET':
        items = with_retry(lambda: list(
            QualityTraining.objects.prefetch_related('jenis_quality_trainings').order_by('-created_at')
        ))
        return Response(QualityTrainingSerializer(items, many=True).data)

    data = request_payload(request)
    if not data.get('title'):
        return error_response('Title is required')

    item = run_audited(
        request.user.pk,
        lambda: QualityTraining.objects.create(
            title=data['title'],
            description=data.get('description'),
            logos=data.get('logos') or [],
            created_by=get_user_label(request.user) or 'system',
        ),
    )
    return Response(QualityTrainingSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def quality_training_detail(request, pk):
    item = with_retry(
        lambda: QualityTraining.objects.prefetch_related('jenis_quality_trainings').filter(pk=pk).first()
    )
    if item is None:
        return error_response(NOT_FOUND_MESSAGE, status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(QualityTrainingSerializer(item).data)

    if request.method == 'PUT':
        data = request_payload(request)
        if not data.get('title'):
            return error_response('Title is required')

        def update():
            item.title = data['title']
            item.description = data.get('description')
            item.logos = data.get('logos') or []
            item.updated_by = data.get('updated_by')
            item.update_notes = data.get('update_notes')
            item.save()
            return item

        run_audited(request.user.pk, update)
        return Response(QualityTrainingSerializer(item).data)

    # DELETE
    run_audited(request.user.pk, item.delete)
    logger.info(f"Quality training {item.title} deleted by {request.user.email}")
    return Response({'message': DELETED_MESSAGE})


# Jenis quality training views
def _validate_jenis(data):
    if not data.get('name'):
        return None, 'Name is required'
    if not data.get('quality_training'):
        return None, 'QualityTraining is required'
    training = QualityTraining.objects.filter(pk=data['quality_training']).first()
    if training is None:
        return None, 'QualityTraining not found'
    return training, None


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def jenis_quality_training_list_create(request):
    """List jenis quality trainings, or create one with its details and subdetails"""
    if request.method == 'GET':
        items = with_retry(lambda: list(_jenis_queryset().order_by('-created_at')))
        return Response(JenisQualityTrainingSerializer(items, many=True).data)

    data = request_payload(request)
    training, error = _validate_jenis(data)
    if error:
        return error_response(error)

    author = get_user_label(request.user) or 'system'

    def create():
        jenis = JenisQualityTraining.objects.create(
            name=data['name'],
            description=data.get('description'),
            logos=data.get('logos') or [],
            quality_training=training,
            created_by=author,
            updated_by=data.get('updated_by'),
            update_notes=data.get('update_notes'),
        )
        _create_detail_tree(jenis, data.get('details'), author)
        return jenis

    jenis = run_audited(request.user.pk, create)
    return Response(
        JenisQualityTrainingSerializer(_jenis_queryset().get(pk=jenis.pk)).data,
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def jenis_quality_training_detail(request, pk):
    jenis = with_retry(lambda: _jenis_queryset().filter(pk=pk).first())
    if jenis is None:
        return error_response(NOT_FOUND_MESSAGE, status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(JenisQualityTrainingSerializer(jenis).data)

    if request.method == 'PUT':
        data = request_payload(request)
        training, error = _validate_jenis(data)
        if error:
            return error_response(error)

        def update():
            jenis.name = data['name']
            jenis.description = data.get('description')
            jenis.logos = data.get('logos') or []
            jenis.quality_training = training
            jenis.updated_by = data.get('updated_by')
            jenis.update_notes = data.get('update_notes')
            jenis.save()
            # Details are always rebuilt from the payload
            jenis.detail_quality_trainings.all().delete()
            _create_detail_tree(jenis, data.get('details'), get_user_label(request.user) or 'system')
            return jenis

        run_audited(request.user.pk, update)
        return Response(JenisQualityTrainingSerializer(_jenis_queryset().get(pk=jenis.pk)).data)

    # DELETE
    run_audited(request.user.pk, jenis.delete)
    return Response({'message': DELETED_MESSAGE})


# Detail quality training views
def _validate_detail(data):
    if not data.get('name'):
        return None, 'Name is required'
    if not data.get('jenis_quality_training'):
        return None, 'Jenis is required'
    jenis = JenisQualityTraining.objects.filter(pk=data['jenis_quality_training']).first()
    if jenis is None:
        return None, 'Jenis not found'
    return jenis, None


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def detail_quality_training_list_create(request):
    if request.method == 'GET':
        items = with_retry(lambda: list(_detail_queryset().order_by('-created_at')))
        return Response(DetailWithJenisSerializer(items, many=True).data)

    data = request_payload(request)
    jenis, error = _validate_detail(data)
    if error:
        return error_response(error)

    detail = run_audited(
        request.user.pk,
        lambda: DetailQualityTraining.objects.create(
            jenis_quality_training=jenis,
            name=data['name'],
            description=data.get('description'),
            linkslide=data.get('linkslide'),
            logos=data.get('logos') or [],
            created_by=get_user_label(request.user) or 'system',
        ),
    )
    return Response(DetailWithJenisSerializer(_detail_queryset().get(pk=detail.pk)).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def detail_quality_training_detail(request, pk):
    detail = with_retry(lambda: _detail_queryset().filter(pk=pk).first())
    if detail is None:
        return error_response(NOT_FOUND_MESSAGE, status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(DetailWithJenisSerializer(detail).data)

    if request.method == 'PUT':
        data = request_payload(request)
        jenis, error = _validate_detail(data)
        if error:
            return error_response(error)

        def update():
            detail.jenis_quality_training = jenis
            detail.name = data['name']
            detail.description = data.get('description')
            detail.linkslide = data.get('linkslide')
            detail.logos = data.get('logos') or []
            detail.updated_by = data.get('updated_by') or get_user_label(request.user)
            detail.update_notes = data.get('update_notes')
            detail.save()
            return detail

        run_audited(request.user.pk, update)
        return Response(DetailWithJenisSerializer(_detail_queryset().get(pk=detail.pk)).data)

    # DELETE
    run_audited(request.user.pk, detail.delete)
    return Response({'message': DELETED_MESSAGE})
