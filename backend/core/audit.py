"""
Tracer update queries and display enrichment.

Every audited table belongs to a ``DashboardModel`` subclass (or ``User``),
so record names, parent chains and scope descendants are all resolved from
model metadata instead of per-table lookups.
"""
import logging
from collections import deque
from functools import lru_cache

from django.apps import apps
from django.core.exceptions import ValidationError
from django.db.models import Q

from .models import TracerUpdate
from .serializers import TracerUpdateSerializer

logger = logging.getLogger(__name__)

AUDITED_TABLES = (
    'brands',
    'kategori_produks',
    'subkategori_produks',
    'produks',
    'detail_produks',
    'kategori_sops',
    'sops',
    'jenis_sops',
    'detail_sops',
    'users',
    'agents',
    'knowledges',
    'detail_knowledges',
    'jenis_detail_knowledges',
    'produk_jenis_detail_knowledges',
    'quality_trainings',
    'jenis_quality_trainings',
    'detail_quality_trainings',
    'subdetail_quality_trainings',
    'announcements',
)

# Columns never written to tracer_updates
EXCLUDED_FIELDS = ('updated_at', 'password', 'last_login')

# Query parameter -> model label of the scope root
SCOPE_PARAMS = {
    'brandId': 'catalog.Brand',
    'categoryId': 'catalog.KategoriProduk',
    'subcategoryId': 'catalog.SubkategoriProduk',
    'knowledgeId': 'knowledge.Knowledge',
    'sopId': 'sop.SOP',
    'qualityTrainingId': 'quality_training.QualityTraining',
}


@lru_cache(maxsize=None)
def _table_model_map():
    return {model._meta.db_table: model for model in apps.get_models()}


def get_model_for_table(table):
    return _table_model_map().get(table)


def is_audited(model):
    return model._meta.db_table in AUDITED_TABLES


def get_record(table, key):
    model = get_model_for_table(table)
    if model is None or not key:
        return None
    try:
        return model._default_manager.filter(pk=key).first()
    except (ValueError, TypeError, ValidationError):
        # key is not a valid primary key for this table
        return None


def record_label(instance):
    if instance is None:
        return None
    value = getattr(instance, 'display_name', None)
    return str(value) if value is not None else None


def table_label(model):
    return str(model._meta.verbose_name)


def format_table_name(table):
    """``kategori_produks`` -> ``Kategori Produks``"""
    return ' '.join(word[:1].upper() + word[1:] for word in table.split('_'))


def get_scope_filter(request_params):
    """First scope parameter present in the query, as ``(param, value)``"""
    for param in SCOPE_PARAMS:
        value = request_params.get(param)
        if value:
            return param, value
    return None, None


def collect_scope_keys(model, pk):
    """
    ``{table: {keys}}`` for a record and every audited record below it.

    Walks reverse foreign keys breadth first, so a brand collects its
    categories, their subcategories, every product attached at any of those
    levels and the product details.
    """
    keys = {}
    queue = deque([(model, {str(pk)})])
    while queue:
        current, pks = queue.popleft()
        table = current._meta.db_table
        new_pks = pks - keys.get(table, set())
        if not new_pks:
            continue
        keys.setdefault(table, set()).update(new_pks)

        for relation in current._meta.related_objects:
            child = relation.related_model
            if not relation.one_to_many and not relation.one_to_one:
                continue
            if not is_audited(child):
                continue
            child_pks = set(
                str(value) for value in child._default_manager.filter(
                    **{f"{relation.field.name}__in": list(new_pks)}
                ).values_list('pk', flat=True)
            )
            if child_pks:
                queue.append((child, child_pks))
    return keys


def scope_queryset(model, pk):
    keys = collect_scope_keys(model, pk)
    condition = Q()
    for table, table_keys in keys.items():
        condition |= Q(source_table=table, source_key__in=list(table_keys))
    return TracerUpdate.objects.filter(condition)


def get_logs_by_table(table, limit=100):
    return list(TracerUpdate.objects.filter(source_table=table).order_by('-changed_at')[:limit])


def get_logs_by_record(table, key):
    return list(TracerUpdate.objects.filter(source_table=table, source_key=key).order_by('-changed_at'))


def get_logs_by_action(action, limit=100):
    return list(TracerUpdate.objects.filter(action_type=action).order_by('-changed_at')[:limit])


def get_logs_with_filters(scope_label, scope_id, table=None, action=None, limit=100):
    model = apps.get_model(scope_label)
    queryset = scope_queryset(model, scope_id)
    if table:
        queryset = queryset.filter(source_table=table)
    if action:
        queryset = queryset.filter(action_type=action)
    return list(queryset.order_by('-changed_at')[:limit])


def get_record_history(table, key):
    """Changes of one record, oldest first, one group per save"""
    history = []
    current = None
    logs = TracerUpdate.objects.filter(source_table=table, source_key=key).order_by('changed_at', 'id')
    for log in logs:
        if current is None or current['timestamp'] != log.changed_at:
            current = {
                'timestamp': log.changed_at,
                'action': log.action_type,
                'changedBy': log.changed_by,
                'changes': [],
            }
            history.append(current)
        current['changes'].append({
            'field': log.field_name,
            'oldValue': log.old_value,
            'newValue': log.new_value,
        })
    return history


class ChangedByResolver:
    """Looks up user/agent names once per request"""

    def __init__(self):
        self._names = {}

    def __call__(self, changed_by):
        if not changed_by:
            return None
        key = str(changed_by)
        if key not in self._names:
            self._names[key] = self._lookup(key)
        return self._names[key]

    def _lookup(self, key):
        for label in ('core.User', 'agents.Agent'):
            model = apps.get_model(label)
            try:
                name = model._default_manager.filter(pk=key).values_list('name', flat=True).first()
            except (ValueError, TypeError, ValidationError):
                name = None
            if name:
                return name
        return key


def related_table_info(instance):
    """Parent chain of a record as ``[{tableName, fieldName, value}]``, nearest first"""
    if instance is None or not hasattr(instance, 'get_audit_ancestors'):
        return []
    return [
        {
            'tableName': table_label(type(parent)),
            'fieldName': parent.label_field,
            'value': record_label(parent),
        }
        for parent in instance.get_audit_ancestors()
    ]


def related_model_for_field(model, field_name):
    """Model a tracer field points at: the table itself for ``id``, the FK target for ``*_id``"""
    if model is None:
        return None
    if field_name == 'id':
        return model
    for field in model._meta.concrete_fields:
        if field.attname == field_name and field.is_relation:
            return field.related_model
    return None


def display_field_name(field_name):
    if field_name == 'id':
        return 'Name'
    base = field_name[:-3] if field_name.endswith('_id') else field_name
    return ' '.join(word[:1].upper() + word[1:] for word in base.split('_')) or field_name


def _resolve_value(model, value):
    if not value:
        return value
    instance = None
    try:
        instance = model._default_manager.filter(pk=value).first()
    except (ValueError, TypeError, ValidationError):
        pass
    return record_label(instance) or value


def enrich_tracer_update(update, resolve_changed_by=None):
    """Serialized tracer update with names instead of keys where possible"""
    resolve_changed_by = resolve_changed_by or ChangedByResolver()
    data = serialize_tracer_update(update)
    try:
        model = get_model_for_table(update.source_table)
        source = get_record(update.source_table, update.source_key)

        target = related_model_for_field(model, update.field_name)
        if target is not None:
            data['fieldName'] = display_field_name(update.field_name)
            data['oldValue'] = _resolve_value(target, update.old_value)
            data['newValue'] = _resolve_value(target, update.new_value)

        if update.field_name == 'update_notes':
            update_notes = update.new_value or update.old_value
        else:
            update_notes = getattr(source, 'update_notes', None)

        data['updateNotes'] = update_notes or None
        data['relatedTableInfo'] = related_table_info(source)
        data['changedBy'] = resolve_changed_by(update.changed_by)
    except Exception as e:
        logger.warning(f"Could not enhance update for {update.source_table}:{update.source_key}: {e}")
    return data


def serialize_tracer_update(update):
    return dict(TracerUpdateSerializer(update).data)


def notification_parent_info(record):
    """``{brandName, categoryName, ...}`` from the ancestors that carry a key"""
    if record is None or not hasattr(record, 'get_audit_ancestors'):
        return None
    info = {}
    for parent in record.get_audit_ancestors():
        key = getattr(parent, 'parent_info_key', None)
        if key:
            info[key] = record_label(parent)
    return info or None


def build_notification(update, resolve_changed_by=None):
    resolve_changed_by = resolve_changed_by or ChangedByResolver()
    table_name = format_table_name(update.source_table)

    record_name = None
    parent_info = None
    try:
        record = get_record(update.source_table, update.source_key)
        if record is not None and hasattr(record, 'get_notification_record'):
            record = record.get_notification_record()
        if record is not None:
            record_name = record_label(record)
            parent_info = notification_parent_info(record)
    except Exception as e:
        logger.warning(f"Could not get record name for {update.source_table}:{update.source_key}: {e}")

    return {
        'id': update.id,
        'type': update.action_type,
        'title': f"{table_name} - {update.field_name}",
        'message': f"{update.action_type} operation on {table_name}",
        'sourceTable': update.source_table,
        'sourceKey': update.source_key,
        'recordName': record_name,
        'parentInfo': parent_info,
        'fieldName': update.field_name,
        'changedBy': resolve_changed_by(update.changed_by),
        'changedAt': update.changed_at.isoformat() if update.changed_at else None,
        'isRead': False,
    }
