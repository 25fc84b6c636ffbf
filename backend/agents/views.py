import logging
import math

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.db.models import Count, Prefetch, Q
from django.utils import timezone

from backend.core.cache_signals import suspend_cache_signals
from backend.core.cache_utils import AGENT_STATS_CACHE_KEY, AGENT_STATS_CACHE_TTL, cached_query, invalidate_agent_stats_cache
from backend.core.exceptions import error_response
from backend.core.permissions import IsAdminRole
from backend.core.utils import paginate, request_payload, run_audited, with_retry
from .models import Agent, Performance
from .serializers import AgentSerializer, AgentListSerializer
from .spreadsheets import EMAIL_REGEX, SpreadsheetError, parse_agent_rows, parse_score_rows

logger = logging.getLogger(__name__)

User = get_user_model()

MIN_PASSWORD_LENGTH = 6
EDITABLE_SCORES = ('qa_score', 'quiz_score', 'typing_test_score')


def _agent_queryset():
    return Agent.objects.prefetch_related(
        Prefetch('performances', queryset=Performance.objects.order_by('-timestamp'))
    )


def _current_month_performance(agent, now):
    return Performance.objects.filter(
        agent=agent,
        timestamp__year=now.year,
        timestamp__month=now.month,
    ).first()


@api_view(['GET', 'POST', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def agent_list(request):
    """
    GET lists agents with search and pagination, POST creates one, PATCH
    edits the current month's scores of the agent named by ``id`` and DELETE
    removes the agent named by the ``id`` query parameter.
    """
    if request.method == 'GET':
        queryset = _agent_queryset().order_by('-created_at')
        search = (request.query_params.get('search') or '').strip()
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(email__icontains=search))
        agents, pagination = with_retry(lambda: paginate(queryset, request))
        return Response({
            'users': AgentListSerializer(agents, many=True).data,
            'pagination': pagination,
        })

    if request.method == 'POST':
        return _create_agent(request)
    if request.method == 'PATCH':
        return _update_agent_scores(request)
    return _delete_agent(request)


def _create_agent(request):
    data = request_payload(request)
    name = data.get('name')
    email = data.get('email')
    password = data.get('password')

    if not all(isinstance(value, str) and value for value in (name, email, password)):
        return error_response('Name, email, and password are required')
    if not EMAIL_REGEX.match(email):
        return error_response('Invalid email format')
    if len(password) < MIN_PASSWORD_LENGTH:
        return error_response('Password must be at least 6 characters')

    email = email.lower()
    if Agent.objects.filter(email=email).exists():
        return error_response('Agent with this email already exists', status.HTTP_409_CONFLICT)

    def create():
        agent = Agent(
            name=name,
            email=email,
            category=Agent.normalize_category(data.get('category')),
            is_active=True,
        )
        agent.set_password(password)
        agent.save()
        return agent

    agent = run_audited(request.user.pk, create)
    logger.info(f"Agent {agent.email} created by {request.user.email}")
    return Response(
        {'message': 'Agent created successfully', 'agent': AgentSerializer(agent).data},
        status=status.HTTP_201_CREATED,
    )


def _update_agent_scores(request):
    agent_id = request.data.get('id')
    if not agent_id:
        return error_response('Agent ID is required')
    agent = Agent.objects.filter(pk=agent_id).first()
    if agent is None:
        return error_response('Agent not found', status.HTTP_404_NOT_FOUND)

    scores = {}
    for field in EDITABLE_SCORES:
        if field in request.data:
            try:
                value = float(request.data[field] or 0)
            except (TypeError, ValueError):
                value = None
            if value is None or not math.isfinite(value):
                return error_response(f'{field}: A valid number is required.')
            scores[field] = max(value, 0)

    def update():
        now = timezone.now()
        performance = _current_month_performance(agent, now)
        if performance is None:
            performance = Performance(agent=agent)
        for field, value in scores.items():
            setattr(performance, field, value)
        performance.timestamp = now
        performance.save()

    run_audited(request.user.pk, update)
    return Response({
        'message': 'Agent updated successfully',
        'agent': AgentListSerializer(_agent_queryset().get(pk=agent.pk)).data,
    })


def _delete_agent(request):
    agent_id = request.query_params.get('id')
    if not agent_id:
        return error_response('Agent ID is required')
    agent = Agent.objects.filter(pk=agent_id).first()
    if agent is None:
        return error_response('Agent not found', status.HTTP_404_NOT_FOUND)

    run_audited(request.user.pk, agent.delete)
    logger.info(f"Agent {agent.email} deleted by {request.user.email}")
    return Response({'message': 'Agent deleted successfully'})


@cached_query(cache_ttl=AGENT_STATS_CACHE_TTL, key_prefix=AGENT_STATS_CACHE_KEY)
def compute_agent_stats():
    """
    Category totals plus average scores over every agent's latest
    performance. Agents without a performance count as 0.
    """
    counts = dict(
        Agent.objects.values_list('category').annotate(total=Count('id')).order_by()
    )
    total_agents = sum(counts.values())

    sums = {'qa_score': 0.0, 'quiz_score': 0.0, 'typing_test_score': 0.0}
    seen = set()
    latest = Performance.objects.order_by('agent_id', '-timestamp').values(
        'agent_id', 'qa_score', 'quiz_score', 'typing_test_score'
    )
    for row in latest:
        if row['agent_id'] in seen:
            continue
        seen.add(row['agent_id'])
        for field in sums:
            sums[field] += row[field] or 0

    def average(field):
        return sums[field] / total_agents if total_agents else 0

    return {
        'totals': {
            'totalAgents': total_agents,
            'totalSocMed': counts.get(Agent.CATEGORY_SOCIAL_MEDIA, 0),
            'totalECom': counts.get(Agent.CATEGORY_ECOMMERCE, 0),
        },
        'averages': {
            'qaScore': average('qa_score'),
            'quizScore': average('quiz_score'),
            'typingTestScore': average('typing_test_score'),
        },
    }


@api_view(['GET'])
@permission_classes([IsAdminRole])
def agent_stats(request):
    return Response(with_retry(compute_agent_stats))


@api_view(['POST'])
@permission_classes([IsAdminRole])
@parser_classes([MultiPartParser, FormParser])
def agent_upload(request):
    """Bulk-create agents from an Excel sheet"""
    file = request.FILES.get('file')
    if not file:
        return error_response('File diperlukan')

    try:
        rows = parse_agent_rows(file)
    except SpreadsheetError as e:
        return error_response(str(e))

    existing_emails = {email.lower() for email in Agent.objects.values_list('email', flat=True)}
    existing_emails.update(email.lower() for email in User.objects.values_list('email', flat=True))
    success, errors = [], []

    # One invalidation for the whole batch instead of one per row
    with suspend_cache_signals():
        for row in rows:
            email = row['email'].strip().lower()
            entry = {'nama': row['name'], 'email': row['email']}

            if not EMAIL_REGEX.match(row['email']):
                errors.append({**entry, 'error': 'Format email tidak valid'})
                continue
            if len(row['password']) < MIN_PASSWORD_LENGTH:
                errors.append({**entry, 'error': 'Password harus minimal 6 karakter'})
                continue
            if email in existing_emails:
                errors.append({**entry, 'error': 'Email sudah terdaftar'})
                continue

            def create(row=row, email=email):
                agent = Agent(
                    name=row['name'],
                    email=email,
                    category=Agent.normalize_category(row['category']),
                    is_active=True,
                )
                agent.set_password(row['password'])
                agent.save()

            try:
                run_audited(request.user.pk, create)
            except DatabaseError as e:
                logger.error(f"Agent import failed for {email}: {e}")
                errors.append({**entry, 'error': str(e)})
                continue

            existing_emails.add(email)
            success.append(entry)

    invalidate_agent_stats_cache()
    logger.info(f"Agent upload by {request.user.email}: {len(success)} created, {len(errors)} errors")
    return Response({
        'message': 'Upload selesai',
        'summary': {
            'total': len(rows),
            'success': len(success),
            'errors': len(errors),
        },
        'details': {
            'success': success,
            'errors': errors,
        },
    })


@api_view(['POST'])
@permission_classes([IsAdminRole])
@parser_classes([MultiPartParser, FormParser])
def agent_upload_scores(request):
    """
    Import score cards from an Excel sheet.

    Agents are matched by name (case-insensitive). A performance recorded in
    the current calendar month is overwritten, otherwise a new one is added.
    """
    file = request.FILES.get('file')
    spreadsheet_url = request.data.get('spreadsheetUrl') or request.data.get('spreadsheet_url')
    if not file and not spreadsheet_url:
        return error_response('File atau spreadsheet URL diperlukan')
    if not file:
        return error_response('Google Sheets URL support belum tersedia. Silakan upload file Excel.')

    try:
        rows = parse_score_rows(file)
    except SpreadsheetError as e:
        return error_response(str(e))

    agents_by_name = {
        name.strip().lower(): agent_id
        for agent_id, name in Agent.objects.values_list('id', 'name')
    }
    now = timezone.now()
    success, not_found, errors = [], [], []

    with suspend_cache_signals():
        for row in rows:
            agent_id = agents_by_name.get(row['name'].strip().lower())
            if agent_id is None:
                not_found.append({'nama': row['name']})
                continue

            values = {key: value for key, value in row.items() if key != 'name'}

            def save(agent_id=agent_id, values=values):
                performance = Performance.objects.filter(
                    agent_id=agent_id,
                    timestamp__year=now.year,
                    timestamp__month=now.month,
                ).first()
                if performance is None:
                    performance = Performance(agent_id=agent_id)
                for field, value in values.items():
                    setattr(performance, field, value)
                performance.timestamp = now
                performance.save()

            try:
                run_audited(request.user.pk, save)
            except DatabaseError as e:
                logger.error(f"Score import failed for {row['name']}: {e}")
                errors.append({'nama': row['name'], 'error': str(e)})
                continue
            success.append({'nama': row['name'], 'agentId': str(agent_id)})

    invalidate_agent_stats_cache()
    logger.info(
        f"Score upload by {request.user.email}: {len(success)} saved, "
        f"{len(not_found)} not found, {len(errors)} errors"
    )
    return Response({
        'message': 'Upload selesai',
        'summary': {
            'total': len(rows),
            'success': len(success),
            'notFound': len(not_found),
            'errors': len(errors),
        },
        'details': {
            'success': success,
            'notFound': not_found,
            'errors': errors,
        },
    })
