from rest_framework import serializers
from .models import KategoriSOP, SOP, JenisSOP, DetailSOP


class DetailSOPSerializer(serializers.ModelSerializer):
    class Meta:
        model = DetailSOP
        fields = ['id', 'name', 'value', 'jenis_sop', 'created_at', 'updated_at']
        read_only_fields = ['id', 'jenis_sop', 'created_at', 'updated_at']


class JenisSOPBasicSerializer(serializers.ModelSerializer):
    class Meta:
        model = JenisSOP
        fields = [
            'id', 'name', 'content', 'images', 'sop',
            'created_by', 'updated_by', 'update_notes', 'created_at', 'updated_at',
        ]


class JenisSOPWithDetailsSerializer(JenisSOPBasicSerializer):
    detail_sops = DetailSOPSerializer(many=True, read_only=True)

    class Meta(JenisSOPBasicSerializer.Meta):
        fields = JenisSOPBasicSerializer.Meta.fields + ['detail_sops']


class KategoriSOPBasicSerializer(serializers.ModelSerializer):
    class Meta:
        model = KategoriSOP
        fields = ['id', 'name', 'description', 'created_at', 'updated_at']


class SOPWithJenisSerializer(serializers.ModelSerializer):
    jenis_sops = JenisSOPBasicSerializer(many=True, read_only=True)

    class Meta:
        model = SOP
        fields = ['id', 'name', 'description', 'kategori_sop', 'jenis_sops', 'created_at', 'updated_at']


class KategoriSOPSerializer(KategoriSOPBasicSerializer):
    """Kategori with its SOPs and their jenis"""
    sops = SOPWithJenisSerializer(many=True, read_only=True)

    class Meta(KategoriSOPBasicSerializer.Meta):
        fields = KategoriSOPBasicSerializer.Meta.fields + ['sops']


class SOPSerializer(serializers.ModelSerializer):
    """SOP with its kategori and its jenis, each with details"""
    kategori_sop = KategoriSOPBasicSerializer(read_only=True)
    kategori_sop_id = serializers.UUIDField(read_only=True)
    jenis_sops = JenisSOPWithDetailsSerializer(many=True, read_only=True)

    class Meta:
        model = SOP
        fields = [
            'id', 'name', 'description', 'kategori_sop', 'kategori_sop_id', 'jenis_sops',
            'created_at', 'updated_at',
        ]


class SOPWithKategoriSerializer(serializers.ModelSerializer):
    kategori_sop = KategoriSOPBasicSerializer(read_only=True)

    class Meta:
        model = SOP
        fields = ['id', 'name', 'description', 'kategori_sop', 'created_at', 'updated_at']


class JenisSOPSerializer(JenisSOPBasicSerializer):
    """Jenis SOP with its SOP (and kategori) and its details"""
    sop = SOPWithKategoriSerializer(read_only=True)
    sop_id = serializers.UUIDField(read_only=True)
    detail_sops = DetailSOPSerializer(many=True, read_only=True)

    class Meta(JenisSOPBasicSerializer.Meta):
        fields = JenisSOPBasicSerializer.Meta.fields + ['sop_id', 'detail_sops']
