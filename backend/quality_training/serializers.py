from rest_framework import serializers
from .models import (
    QualityTraining, JenisQualityTraining, DetailQualityTraining, SubdetailQualityTraining,
)

AUDIT_FIELDS = ['created_by', 'updated_by', 'update_notes', 'created_at', 'updated_at']


class SubdetailQualityTrainingSerializer(serializers.ModelSerializer):
    class Meta:
        model = SubdetailQualityTraining
        fields = ['id', 'name', 'description', 'logos', 'detail_quality_training'] + AUDIT_FIELDS


class DetailQualityTrainingSerializer(serializers.ModelSerializer):
    subdetail_quality_trainings = SubdetailQualityTrainingSerializer(many=True, read_only=True)

    class Meta:
        model = DetailQualityTraining
        fields = [
            'id', 'name', 'description', 'linkslide', 'logos', 'jenis_quality_training',
            'subdetail_quality_trainings',
        ] + AUDIT_FIELDS


class JenisQualityTrainingBasicSerializer(serializers.ModelSerializer):
    class Meta:
        model = JenisQualityTraining
        fields = ['id', 'name', 'description', 'logos', 'quality_training'] + AUDIT_FIELDS


class QualityTrainingSerializer(serializers.ModelSerializer):
    jenis_quality_trainings = JenisQualityTrainingBasicSerializer(many=True, read_only=True)

    class Meta:
        model = QualityTraining
        fields = ['id', 'title', 'description', 'logos', 'jenis_quality_trainings'] + AUDIT_FIELDS


class QualityTrainingBasicSerializer(serializers.ModelSerializer):
    class Meta:
        model = QualityTraining
        fields = ['id', 'title', 'description', 'logos'] + AUDIT_FIELDS


class JenisQualityTrainingSerializer(JenisQualityTrainingBasicSerializer):
    """Jenis with its programme and the full detail/subdetail tree"""
    quality_training = QualityTrainingBasicSerializer(read_only=True)
    quality_training_id = serializers.UUIDField(read_only=True)
    detail_quality_trainings = DetailQualityTrainingSerializer(many=True, read_only=True)

    class Meta(JenisQualityTrainingBasicSerializer.Meta):
        fields = JenisQualityTrainingBasicSerializer.Meta.fields + [
            'quality_training_id', 'detail_quality_trainings',
        ]


class DetailWithJenisSerializer(DetailQualityTrainingSerializer):
    jenis_quality_training = JenisQualityTrainingBasicSerializer(read_only=True)
    jenis_quality_training_id = serializers.UUIDField(read_only=True)

    class Meta(DetailQualityTrainingSerializer.Meta):
        fields = DetailQualityTrainingSerializer.Meta.fields + ['jenis_quality_training_id']
