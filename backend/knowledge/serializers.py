from rest_framework import serializers
from .models import Knowledge, DetailKnowledge, JenisDetailKnowledge, ProdukJenisDetailKnowledge


class ProdukJenisDetailKnowledgeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProdukJenisDetailKnowledge
        fields = ['id', 'name', 'description', 'logos']


class JenisDetailKnowledgeSerializer(serializers.ModelSerializer):
    produk_jenis_detail_knowledges = ProdukJenisDetailKnowledgeSerializer(many=True, read_only=True)

    class Meta:
        model = JenisDetailKnowledge
        fields = ['id', 'name', 'description', 'logos', 'produk_jenis_detail_knowledges']


class DetailKnowledgeSerializer(serializers.ModelSerializer):
    class Meta:
        model = DetailKnowledge
        fields = ['id', 'name', 'description', 'logos']


class DetailKnowledgeTreeSerializer(DetailKnowledgeSerializer):
    jenis_detail_knowledges = JenisDetailKnowledgeSerializer(many=True, read_only=True)

    class Meta(DetailKnowledgeSerializer.Meta):
        fields = DetailKnowledgeSerializer.Meta.fields + ['jenis_detail_knowledges']


class KnowledgeSerializer(serializers.ModelSerializer):
    """Knowledge with its first-level details"""
    detail_knowledges = DetailKnowledgeSerializer(many=True, read_only=True)

    class Meta:
        model = Knowledge
        fields = [
            'id', 'title', 'description', 'logos', 'created_at', 'updated_at',
            'created_by', 'updated_by', 'update_notes', 'detail_knowledges',
        ]


class KnowledgeTreeSerializer(KnowledgeSerializer):
    """Knowledge with the full detail -> jenis -> produk tree"""
    detail_knowledges = DetailKnowledgeTreeSerializer(many=True, read_only=True)
