import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from django.db.models import Prefetch, Q

from backend.core.exceptions import StorageError, error_response
from backend.core.permissions import IsAdminRole
from backend.core.storage import delete_files, indexed_files, upload_file
from backend.core.utils import clean_text, get_user_label, paginate, parse_json_field, run_audited, with_retry
from .models import Knowledge, DetailKnowledge, JenisDetailKnowledge, ProdukJenisDetailKnowledge
from .serializers import KnowledgeSerializer, KnowledgeTreeSerializer

logger = logging.getLogger(__name__)

KNOWLEDGE_PATH = 'knowledge'
DETAIL_PATH = 'knowledge/detail'


class UploadFailed(Exception):
    """A logo could not be stored; carries the message returned to the client"""


def _upload_logos(files, single_key, prefix, path, message):
    """Upload ``single_key`` and then ``{prefix}_0..n``, returning their URLs"""
    uploads = []
    single = files.get(single_key)
    if single is not None and single.size:
        uploads.append(single)
    uploads.extend(indexed_files(files, prefix))

    urls = []
    for upload in uploads:
        try:
            urls.append(upload_file(upload, path))
        except StorageError as e:
            logger.error(f"Logo upload to {path} failed: {e}")
            raise UploadFailed(message)
    return urls


def _resolve_details(request, details):
    """
    Attach uploaded logos to each detail of the ``details`` form field.

    Files are matched by the detail's ``index``: ``detailLogo_{index}`` and
    ``detailLogo_{index}_{j}``.
    """
    resolved = []
    for position, detail in enumerate(details or []):
        if not isinstance(detail, dict):
            continue
        index = detail.get('index', position)
        logos = _upload_logos(
            request.FILES, f'detailLogo_{index}', f'detailLogo_{index}', DETAIL_PATH,
            'Failed to upload detail logo',
        )
        existing = detail.get('existing_logo_url') or detail.get('existingLogoUrl')
        if existing and not logos:
            logos = [existing]
        resolved.append({
            'name': clean_text(detail.get('name')) or '',
            'description': detail.get('description') or '',
            'logos': logos,
            'jenis': detail.get('jenis') or [],
        })
    return resolved


def _create_details(knowledge, resolved):
    for detail in resolved:
        created = DetailKnowledge.objects.create(
            knowledge=knowledge,
            name=detail['name'],
            description=detail['description'],
            logos=detail['logos'],
        )
        for jenis in detail['jenis']:
            if not isinstance(jenis, dict) or not clean_text(jenis.get('name')):
                continue
            jenis_row = JenisDetailKnowledge.objects.create(
                detail_knowledge=created,
                name=clean_text(jenis['name']),
                description=jenis.get('description') or '',
                logos=jenis.get('logos') or [],
            )
            for produk in jenis.get('produk') or []:
                if not isinstance(produk, dict) or not clean_text(produk.get('name')):
                    continue
                ProdukJenisDetailKnowledge.objects.create(
                    jenis_detail_knowledge=jenis_row,
                    name=clean_text(produk['name']),
                    description=produk.get('description') or '',
                    logos=produk.get('logos') or [],
                )


def _knowledge_queryset():
    return Knowledge.objects.prefetch_related('detail_knowledges')


@api_view(['GET', 'POST', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def knowledge_list(request):
    """
    Knowledge collection endpoint.

    GET lists with search and pagination, POST creates from a multipart
    form, PUT updates the record named by the form ``id`` and DELETE removes
    the record named by the ``id`` query parameter.
    """
    if request.method == 'GET':
        queryset = _knowledge_queryset().order_by('-created_at')
        search = (request.query_params.get('search') or '').strip()
        if search:
            queryset = queryset.filter(Q(title__icontains=search) | Q(description__icontains=search))
        items, pagination = with_retry(lambda: paginate(queryset, request))
        return Response({
            'knowledge': KnowledgeSerializer(items, many=True).data,
            'pagination': pagination,
        })

    if request.method == 'POST':
        return _create_knowledge(request)
    if request.method == 'PUT':
        return _update_knowledge(request)
    return _delete_knowledge(request)


def _create_knowledge(request):
    title = clean_text(request.data.get('title'))
    description = clean_text(request.data.get('description'))
    if not title or not description:
        return error_response('Title and description are required')

    details = parse_json_field(request.data.get('details'), default=[])
    try:
        logos = _upload_logos(request.FILES, 'logo', 'logo', KNOWLEDGE_PATH, 'Failed to upload logo')
        resolved = _resolve_details(request, details)
    except UploadFailed as e:
        return error_response(str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

    created_by = request.data.get('created_by') or request.data.get('createdBy') or get_user_label(request.user)

    def create():
        knowledge = Knowledge.objects.create(
            title=title,
            description=description,
            logos=logos,
            created_by=created_by,
        )
        _create_details(knowledge, resolved)
        return knowledge

    knowledge = run_audited(request.user.pk, create)
    logger.info(f"Knowledge {knowledge.title} created by {request.user.email}")
    return Response(
        {
            'message': 'Knowledge created successfully',
            'knowledge': KnowledgeSerializer(_knowledge_queryset().get(pk=knowledge.pk)).data,
        },
        status=status.HTTP_201_CREATED,
    )


def _update_knowledge(request):
    knowledge_id = request.data.get('id')
    if not knowledge_id:
        return error_response('Knowledge ID is required')

    knowledge = Knowledge.objects.filter(pk=knowledge_id).first()
    if knowledge is None:
        return error_response('Knowledge not found', status.HTTP_404_NOT_FOUND)

    details_raw = request.data.get('details')
    try:
        new_logos = _upload_logos(request.FILES, 'logo', 'logo', KNOWLEDGE_PATH, 'Failed to upload logo')
        resolved = _resolve_details(request, parse_json_field(details_raw, default=[])) if details_raw else None
    except UploadFailed as e:
        return error_response(str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

    title = clean_text(request.data.get('title'))
    update_notes = clean_text(request.data.get('update_notes')) or clean_text(request.data.get('updateNotes'))
    updated_by = request.data.get('updated_by') or request.data.get('updatedBy') or get_user_label(request.user)

    def update():
        if title:
            knowledge.title = title
        if 'description' in request.data:
            knowledge.description = request.data.get('description')
        if new_logos:
            knowledge.logos = list(knowledge.logos or []) + new_logos
        knowledge.updated_by = updated_by
        if update_notes:
            knowledge.update_notes = update_notes
        knowledge.save()
        if resolved is not None:
            knowledge.detail_knowledges.all().delete()
            _create_details(knowledge, resolved)
        return knowledge

    run_audited(request.user.pk, update)
    return Response(KnowledgeSerializer(_knowledge_queryset().get(pk=knowledge.pk)).data)


def _delete_knowledge(request):
    knowledge_id = request.query_params.get('id')
    if not knowledge_id:
        return error_response('Knowledge ID is required')

    knowledge = Knowledge.objects.prefetch_related('detail_knowledges').filter(pk=knowledge_id).first()
    if knowledge is None:
        return error_response('Knowledge not found', status.HTTP_404_NOT_FOUND)

    urls = list(knowledge.logos or [])
    for detail in knowledge.detail_knowledges.all():
        urls.extend(detail.logos or [])
    delete_files(urls)

    run_audited(request.user.pk, knowledge.delete)
    logger.info(f"Knowledge {knowledge.title} deleted by {request.user.email}")
    return Response({'message': 'Knowledge deleted successfully'})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def knowledge_detail(request, pk):
    """Knowledge with the full detail -> jenis -> produk tree"""
    def load():
        return Knowledge.objects.prefetch_related(
            Prefetch(
                'detail_knowledges',
                queryset=DetailKnowledge.objects.order_by('created_at').prefetch_related(
                    Prefetch(
                        'jenis_detail_knowledges',
                        queryset=JenisDetailKnowledge.objects.prefetch_related('produk_jenis_detail_knowledges'),
                    )
                ),
            )
        ).filter(pk=pk).first()

    knowledge = with_retry(load)
    if knowledge is None:
        return error_response('Not found', status.HTTP_404_NOT_FOUND)
    return Response(KnowledgeTreeSerializer(knowledge).data)
