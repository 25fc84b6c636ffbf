import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from django.apps import apps
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.db.models import Q

from backend.agents.models import Agent
from backend.catalog.models import Brand, KategoriProduk, SubkategoriProduk, Produk
from backend.knowledge.models import Knowledge
from backend.sop.models import SOP
from . import audit
from .exceptions import error_response
from .models import TracerUpdate
from .permissions import IsAdminRole, IsSuperAdminOrReadOnly
from .serializers import (
    UserSerializer, UserCreateSerializer, UserUpdateSerializer, TracerUpdateSerializer
)
from .utils import normalize_empty_strings, parse_positive_int, request_payload, run_audited, with_retry

logger = logging.getLogger(__name__)

User = get_user_model()


def provision_env_super_admin(email, password):
    """
    Create the environment super admin on first login.

    Only applies when the credentials match SUPER_ADMIN_EMAIL and
    SUPER_ADMIN_PASSWORD and no user with that email exists yet.
    """
    env_email = getattr(settings, 'SUPER_ADMIN_EMAIL', '')
    env_password = getattr(settings, 'SUPER_ADMIN_PASSWORD', '')
    if not env_email or not env_password:
        return None
    if email != env_email or password != env_password:
        return None
    if User.objects.filter(email__iexact=email).exists():
        return None
    user = User.objects.create_superuser(
        email=email,
        password=password,
        name=getattr(settings, 'SUPER_ADMIN_NAME', '') or 'Super Admin',
    )
    logger.info(f"Provisioned super admin {email} from environment")
    return user


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        provision_env_super_admin(attrs.get(self.username_field), attrs.get('password'))
        data = super().validate(attrs)
        # Ensure user is active
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['name'] = user.name
        token['role'] = user.role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Custom token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            # User referenced in token doesn't exist anymore
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    """Custom token refresh view that handles deleted users gracefully"""
    serializer_class = CustomTokenRefreshSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user"""
    return Response(UserSerializer(request.user).data)


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsSuperAdminOrReadOnly])
def user_list_create(request):
    """List all users or create a new user"""
    if request.method == 'GET':
        users = with_retry(lambda: list(User.objects.order_by('-created_at')))
        return Response(UserSerializer(users, many=True).data)

    data = request_payload(request)
    if not all(data.get(field) for field in ('email', 'name', 'password', 'role')):
        return error_response('Missing required fields')

    if User.objects.filter(email__iexact=data['email']).exists():
        return error_response('User already exists')

    serializer = UserCreateSerializer(data=data)
    serializer.is_valid(raise_exception=True)
    user = run_audited(request.user.pk, serializer.save)
    logger.info(f"User {user.email} created by {request.user.email}")
    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsSuperAdminOrReadOnly])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = User.objects.filter(pk=pk).first()
    if user is None:
        return error_response('User not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(UserSerializer(user).data)

    if request.method == 'PUT':
        data = dict(request.data.items())
        email = data.get('email')
        if email and email != user.email and User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
            return error_response('Email already taken')

        serializer = UserUpdateSerializer(user, data=data, partial=True)
        serializer.is_valid(raise_exception=True)

        def save():
            saved = serializer.save()
            # is_active is only applied when sent as a real boolean
            if isinstance(data.get('is_active'), bool):
                saved.is_active = data['is_active']
                saved.save()
            return saved

        user = run_audited(request.user.pk, save)
        return Response(UserSerializer(user).data)

    # DELETE
    if user.is_super_admin:
        return error_response('Cannot delete super admin')
    run_audited(request.user.pk, user.delete)
    logger.info(f"User {user.email} deleted by {request.user.email}")
    return Response({'message': 'User deleted successfully'})


def _first_image(images):
    return images[0] if images else None


def _contains(*fields, query):
    condition = Q()
    for field in fields:
        condition |= Q(**{f"{field}__icontains": query})
    return condition


@api_view(['GET'])
@permission_classes([IsAdminRole])
def global_search(request):
    """
    Search across brands, products, categories, subcategories, SOPs,
    knowledge, users and agents.
    """
    raw_query = request.query_params.get('q', '') or ''
    query = raw_query.strip()
    limit = parse_positive_int(request.query_params.get('limit'), 10, maximum=100)

    if len(query) < 2:
        return Response({'results': [], 'total': 0})

    def run_search():
        results = []

        for brand in Brand.objects.filter(_contains('name', 'description', query=query))[:limit]:
            results.append({
                'type': 'brand',
                'id': str(brand.id),
                'title': brand.name,
                'description': brand.description,
                'image': _first_image(brand.images),
                'url': '/admin/products?tab=brand',
                'metadata': None,
            })

        products = Produk.objects.filter(_contains('name', 'description', 'kapasitas', query=query))[:limit]
        for product in products:
            results.append({
                'type': 'product',
                'id': str(product.id),
                'title': product.name,
                'description': product.description,
                'image': _first_image(product.images),
                'url': f'/admin/products/product/{product.id}',
                'metadata': {
                    'harga': str(product.harga) if product.harga is not None else None,
                    'status': product.status,
                },
            })

        categories = KategoriProduk.objects.select_related('brand').filter(
            _contains('name', 'description', query=query)
        )[:limit]
        for category in categories:
            results.append({
                'type': 'kategori',
                'id': str(category.id),
                'title': category.name,
                'description': category.description or f"Brand: {category.brand.name}",
                'image': _first_image(category.images),
                'url': '/admin/products?tab=category',
                'metadata': {'brand': category.brand.name},
            })

        subcategories = SubkategoriProduk.objects.select_related('kategori_produk__brand').filter(
            _contains('name', 'description', query=query)
        )[:limit]
        for subcategory in subcategories:
            results.append({
                'type': 'subkategori',
                'id': str(subcategory.id),
                'title': subcategory.name,
                'description': subcategory.description or f"Kategori: {subcategory.kategori_produk.name}",
                'image': _first_image(subcategory.images),
                'url': '/admin/products?tab=subcategory',
                'metadata': {
                    'kategori': subcategory.kategori_produk.name,
                    'brand': subcategory.kategori_produk.brand.name,
                },
            })

        for sop in SOP.objects.select_related('kategori_sop').filter(_contains('name', 'description', query=query))[:limit]:
            results.append({
                'type': 'sop',
                'id': str(sop.id),
                'title': sop.name,
                'description': sop.description or f"Kategori: {sop.kategori_sop.name}",
                'image': None,
                'url': '/admin/sop',
                'metadata': {'kategori': sop.kategori_sop.name},
            })

        for knowledge in Knowledge.objects.filter(_contains('title', 'description', query=query))[:limit]:
            results.append({
                'type': 'knowledge',
                'id': str(knowledge.id),
                'title': knowledge.title,
                'description': knowledge.description,
                'image': _first_image(knowledge.logos),
                'url': '/admin/knowledge',
                'metadata': None,
            })

        for user in User.objects.filter(_contains('name', 'email', query=query))[:limit]:
            results.append({
                'type': 'user',
                'id': str(user.id),
                'title': user.name,
                'description': user.email,
                'image': None,
                'url': '/admin/users',
                'metadata': {'role': user.role},
            })

        for agent in Agent.objects.filter(_contains('name', 'email', query=query))[:limit]:
            results.append({
                'type': 'agent',
                'id': str(agent.id),
                'title': agent.name,
                'description': agent.email,
                'image': None,
                'url': '/admin/agents',
                'metadata': {'category': agent.category},
            })

        return results

    results = with_retry(run_search)
    return Response({'results': results, 'total': len(results), 'query': raw_query})


# Audit views
@api_view(['GET'])
@permission_classes([IsAdminRole])
def audit_log_list(request):
    """Tracer updates by scope, record, table or action"""
    params = request.query_params
    table = params.get('table')
    record_id = params.get('recordId')
    action = params.get('action')
    limit = parse_positive_int(params.get('limit'), 100)
    scope_param, scope_id = audit.get_scope_filter(params)

    if scope_param:
        logs = with_retry(lambda: audit.get_logs_with_filters(
            audit.SCOPE_PARAMS[scope_param], scope_id, table=table, action=action, limit=limit,
        ))
    elif table and record_id:
        logs = with_retry(lambda: audit.get_logs_by_record(table, record_id))
    elif table:
        logs = with_retry(lambda: audit.get_logs_by_table(table, limit))
    elif action:
        logs = with_retry(lambda: audit.get_logs_by_action(action, limit))
    else:
        return error_response('Table, action, or related ID parameter is required')

    return Response({'logs': TracerUpdateSerializer(logs, many=True).data})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def audit_record_history(request):
    """Grouped change history of one record"""
    table = request.query_params.get('table')
    record_id = request.query_params.get('recordId')
    if not table or not record_id:
        return error_response('table and recordId parameters are required')
    history = with_retry(lambda: audit.get_record_history(table, record_id))
    return Response({'history': history})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def tracer_update_list(request):
    """
    Tracer updates for a record and everything below it, with names
    resolved for display.
    """
    params = request.query_params
    scope_param, scope_id = audit.get_scope_filter(params)
    source_table = params.get('sourceTable')
    source_key = params.get('sourceKey')

    if scope_param:
        model = apps.get_model(audit.SCOPE_PARAMS[scope_param])
        queryset = audit.scope_queryset(model, scope_id)
    elif source_table:
        queryset = TracerUpdate.objects.filter(source_table=source_table)
        if source_key:
            queryset = queryset.filter(source_key=source_key)
    else:
        return error_response(
            'At least one scope parameter (brandId, categoryId, subcategoryId, knowledgeId, '
            'sopId, qualityTrainingId) or sourceTable is required'
        )

    updates = with_retry(lambda: list(queryset.order_by('-changed_at')))
    resolver = audit.ChangedByResolver()
    return Response([audit.enrich_tracer_update(update, resolver) for update in updates])


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def notification_list(request):
    """Recent tracer updates presented as notifications"""
    if request.method == 'POST':
        data = normalize_empty_strings(request.data) if isinstance(request.data, dict) else {}
        notification_ids = data.get('notificationIds')
        if not isinstance(notification_ids, list):
            return error_response('notificationIds array is required')
        # Read state is not persisted; the client keeps track of it
        return Response({
            'success': True,
            'message': 'Notifications marked as read',
            'markedCount': len(notification_ids),
        })

    limit = parse_positive_int(request.query_params.get('limit'), 50, maximum=500)
    updates = with_retry(lambda: list(TracerUpdate.objects.order_by('-changed_at')[:limit]))
    resolver = audit.ChangedByResolver()
    notifications = [audit.build_notification(update, resolver) for update in updates]
    return Response({
        'notifications': notifications,
        'unreadCount': len(notifications),
        'totalCount': len(notifications),
    })
