from rest_framework import serializers
from .models import Brand, KategoriProduk, SubkategoriProduk, Produk, DetailProduk


AUDIT_FIELDS = ['created_by', 'updated_by', 'update_notes', 'created_at', 'updated_at']


def image_list_field():
    return serializers.ListField(child=serializers.CharField(), required=False, allow_empty=True)


class SubkategoriProdukSerializer(serializers.ModelSerializer):
    class Meta:
        model = SubkategoriProduk
        fields = ['id', 'name', 'description', 'images', 'kategori_produk'] + AUDIT_FIELDS


class KategoriProdukSerializer(serializers.ModelSerializer):
    class Meta:
        model = KategoriProduk
        fields = ['id', 'name', 'description', 'images', 'brand'] + AUDIT_FIELDS


class BrandBasicSerializer(serializers.ModelSerializer):
    class Meta:
        model = Brand
        fields = ['id', 'name', 'description', 'images', 'link_sampul', 'colorbase'] + AUDIT_FIELDS


class KategoriWithSubkategoriSerializer(KategoriProdukSerializer):
    subkategori_produks = SubkategoriProdukSerializer(many=True, read_only=True)

    class Meta(KategoriProdukSerializer.Meta):
        fields = KategoriProdukSerializer.Meta.fields + ['subkategori_produks']


class BrandSerializer(BrandBasicSerializer):
    """Brand with its categories and their subcategories"""
    kategori_produks = KategoriWithSubkategoriSerializer(many=True, read_only=True)

    class Meta(BrandBasicSerializer.Meta):
        fields = BrandBasicSerializer.Meta.fields + ['kategori_produks']


class BrandWriteSerializer(serializers.ModelSerializer):
    images = image_list_field()

    class Meta:
        model = Brand
        fields = ['name', 'description', 'images', 'link_sampul', 'colorbase', 'update_notes']
        extra_kwargs = {
            # duplicates are reported by the view
            'name': {'validators': []},
        }


class CategorySerializer(KategoriProdukSerializer):
    """Category with its brand and subcategories"""
    brand = BrandBasicSerializer(read_only=True)
    brand_id = serializers.UUIDField(read_only=True)
    subkategori_produks = SubkategoriProdukSerializer(many=True, read_only=True)

    class Meta(KategoriProdukSerializer.Meta):
        fields = KategoriProdukSerializer.Meta.fields + ['brand_id', 'subkategori_produks']


class KategoriWithBrandSerializer(KategoriProdukSerializer):
    brand = BrandBasicSerializer(read_only=True)


class SubcategorySerializer(SubkategoriProdukSerializer):
    """Subcategory with its category and the category's brand"""
    kategori_produk = KategoriWithBrandSerializer(read_only=True)
    kategori_produk_id = serializers.UUIDField(read_only=True)

    class Meta(SubkategoriProdukSerializer.Meta):
        fields = SubkategoriProdukSerializer.Meta.fields + ['kategori_produk_id']


class DetailProdukSerializer(serializers.ModelSerializer):
    images = image_list_field()

    class Meta:
        model = DetailProduk
        fields = ['id', 'name', 'value', 'images', 'produk', 'created_at', 'updated_at']
        read_only_fields = ['id', 'produk', 'created_at', 'updated_at']


class ProdukSerializer(serializers.ModelSerializer):
    """Product with its place in the hierarchy and its details"""
    subkategori_produk = SubcategorySerializer(read_only=True)
    kategori_produk = KategoriWithBrandSerializer(read_only=True)
    brand = BrandBasicSerializer(read_only=True)
    detail_produks = DetailProdukSerializer(many=True, read_only=True)

    class Meta:
        model = Produk
        fields = [
            'id', 'name', 'description', 'kapasitas', 'status', 'harga', 'images',
            'subkategori_produk_id', 'kategori_produk_id', 'brand_id',
            'subkategori_produk', 'kategori_produk', 'brand', 'detail_produks',
        ] + AUDIT_FIELDS


class ProdukWriteSerializer(serializers.ModelSerializer):
    images = image_list_field()
    harga = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, allow_null=True)

    class Meta:
        model = Produk
        fields = ['name', 'description', 'kapasitas', 'status', 'harga', 'images', 'update_notes']
