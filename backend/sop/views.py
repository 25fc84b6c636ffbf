import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.db import IntegrityError
from django.db.models import Prefetch

from backend.core.exceptions import error_response
from backend.core.permissions import IsAdminRole
from backend.core.utils import get_user_label, request_payload, run_audited, with_retry
from .models import KategoriSOP, SOP, JenisSOP, DetailSOP
from .serializers import KategoriSOPSerializer, SOPSerializer, JenisSOPSerializer

logger = logging.getLogger(__name__)

DUPLICATE_KATEGORI_MESSAGE = 'Kategori SOP dengan nama ini sudah ada'


def _kategori_queryset():
    return KategoriSOP.objects.prefetch_related(
        Prefetch('sops', queryset=SOP.objects.prefetch_related('jenis_sops'))
    )


def _sop_queryset():
    return SOP.objects.select_related('kategori_sop').prefetch_related(
        Prefetch('jenis_sops', queryset=JenisSOP.objects.prefetch_related('detail_sops'))
    )


def _jenis_queryset():
    return JenisSOP.objects.select_related('sop__kategori_sop').prefetch_related('detail_sops')


def _detail_rows(details):
    return [
        {'name': detail['name'], 'value': detail.get('value')}
        for detail in details or []
        if isinstance(detail, dict) and detail.get('name')
    ]


# Kategori SOP views
@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def kategori_sop_list_create(request):
    """List all kategori SOP or create a new one"""
    if request.method == 'GET':
        kategori = with_retry(lambda: list(_kategori_queryset().order_by('-created_at')))
        return Response(KategoriSOPSerializer(kategori, many=True).data)

    data = request_payload(request)
    if not data.get('name'):
        return error_response('Name is required')
    if KategoriSOP.objects.filter(name=data['name']).exists():
        return error_response(DUPLICATE_KATEGORI_MESSAGE)

    try:
        kategori = run_audited(
            request.user.pk,
            lambda: KategoriSOP.objects.create(name=data['name'], description=data.get('description')),
        )
    except IntegrityError:
        return error_response(DUPLICATE_KATEGORI_MESSAGE)
    return Response(KategoriSOPSerializer(kategori).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def kategori_sop_detail(request, pk):
    """Retrieve, update or delete a kategori SOP"""
    kategori = with_retry(lambda: _kategori_queryset().filter(pk=pk).first())
    if kategori is None:
        return error_response('Kategori SOP not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(KategoriSOPSerializer(kategori).data)

    if request.method == 'PUT':
        data = request_payload(request)
        if not data.get('name'):
            return error_response('Name is required')
        if KategoriSOP.objects.filter(name=data['name']).exclude(pk=kategori.pk).exists():
            return error_response(DUPLICATE_KATEGORI_MESSAGE)

        def update():
            kategori.name = data['name']
            kategori.description = data.get('description')
            kategori.save()
            return kategori

        try:
            run_audited(request.user.pk, update)
        except IntegrityError:
            return error_response(DUPLICATE_KATEGORI_MESSAGE)
        return Response(KategoriSOPSerializer(_kategori_queryset().get(pk=kategori.pk)).data)

    # DELETE
    run_audited(request.user.pk, kategori.delete)
    logger.info(f"Kategori SOP {kategori.name} deleted by {request.user.email}")
    return Response({'message': 'Kategori SOP deleted successfully'})


# SOP views
def _validate_sop(data):
    if not data.get('name'):
        return None, 'Name is required'
    if not data.get('kategori_sop'):
        return None, 'Kategori SOP is required'
    kategori = KategoriSOP.objects.filter(pk=data['kategori_sop']).first()
    if kategori is None:
        return None, 'Kategori SOP not found'
    return kategori, None


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def sop_list_create(request):
    """List all SOPs or create a new SOP"""
    if request.method == 'GET':
        sops = with_retry(lambda: list(_sop_queryset().order_by('-created_at')))
        return Response(SOPSerializer(sops, many=True).data)

    data = request_payload(request)
    kategori, error = _validate_sop(data)
    if error:
        return error_response(error)

    sop = run_audited(
        request.user.pk,
        lambda: SOP.objects.create(name=data['name'], description=data.get('description'), kategori_sop=kategori),
    )
    return Response(SOPSerializer(_sop_queryset().get(pk=sop.pk)).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def sop_detail(request, pk):
    """Retrieve, update or delete an SOP"""
    sop = with_retry(lambda: _sop_queryset().filter(pk=pk).first())
    if sop is None:
        return error_response('SOP not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(SOPSerializer(sop).data)

    if request.method == 'PUT':
        data = request_payload(request)
        kategori, error = _validate_sop(data)
        if error:
            return error_response(error)

        def update():
            sop.name = data['name']
            sop.description = data.get('description')
            sop.kategori_sop = kategori
            sop.save()
            return sop

        run_audited(request.user.pk, update)
        return Response(SOPSerializer(_sop_queryset().get(pk=sop.pk)).data)

    # DELETE
    run_audited(request.user.pk, sop.delete)
    return Response({'message': 'SOP deleted successfully'})


# Jenis SOP views
@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def jenis_sop_list_create(request):
    """List all jenis SOP or create one with its details"""
    if request.method == 'GET':
        jenis = with_retry(lambda: list(_jenis_queryset().order_by('-created_at')))
        return Response(JenisSOPSerializer(jenis, many=True).data)

    data = request_payload(request)
    if not data.get('name'):
        return error_response('Name is required')
    if not data.get('sop'):
        return error_response('SOP is required')
    sop = SOP.objects.filter(pk=data['sop']).first()
    if sop is None:
        return error_response('SOP not found')

    details = _detail_rows(data.get('details'))

    def create():
        jenis = JenisSOP.objects.create(
            name=data['name'],
            content=data.get('content'),
            images=data.get('images') or [],
            sop=sop,
            created_by=get_user_label(request.user) or 'system',
        )
        for row in details:
            DetailSOP.objects.create(jenis_sop=jenis, **row)
        return jenis

    jenis = run_audited(request.user.pk, create)
    return Response(JenisSOPSerializer(_jenis_queryset().get(pk=jenis.pk)).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def jenis_sop_detail(request, pk):
    """Retrieve, update or delete a jenis SOP"""
    jenis = with_retry(lambda: _jenis_queryset().filter(pk=pk).first())
    if jenis is None:
        return error_response('Jenis SOP not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(JenisSOPSerializer(jenis).data)

    if request.method == 'PUT':
        data = request_payload(request)
        if not data.get('name'):
            return error_response('Name is required')
        if not data.get('sop'):
            return error_response('SOP is required')
        if not data.get('update_notes'):
            return error_response('Update notes is required')
        if not data.get('updated_by'):
            return error_response('Updated by is required')
        sop = SOP.objects.filter(pk=data['sop']).first()
        if sop is None:
            return error_response('SOP not found')

        details = _detail_rows(data.get('details'))

        def update():
            jenis.name = data['name']
            jenis.content = data.get('content')
            jenis.images = data.get('images') or []
            jenis.sop = sop
            jenis.updated_by = data['updated_by']
            jenis.update_notes = data['update_notes']
            jenis.save()
            # A non-empty details list replaces every existing detail
            if details:
                jenis.detail_sops.all().delete()
                for row in details:
                    DetailSOP.objects.create(jenis_sop=jenis, **row)
            return jenis

        run_audited(request.user.pk, update)
        return Response(JenisSOPSerializer(_jenis_queryset().get(pk=jenis.pk)).data)

    # DELETE
    run_audited(request.user.pk, jenis.delete)
    return Response({'message': 'Jenis SOP deleted successfully'})
