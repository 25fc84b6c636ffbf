from django.db import models

from backend.core.models import AuthoredModel, DashboardModel


class Brand(AuthoredModel):
    """Product brands"""
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(null=True, blank=True)
    images = models.JSONField(default=list, blank=True)
    link_sampul = models.TextField(null=True, blank=True)
    colorbase = models.CharField(max_length=20, default='#03438f')

    parent_info_key = 'brandName'

    class Meta:
        db_table = 'brands'
        ordering = ['-created_at']
        verbose_name = 'Brand'


class KategoriProduk(AuthoredModel):
    """Product categories, one level under a brand"""
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(null=True, blank=True)
    images = models.JSONField(default=list, blank=True)
    brand = models.ForeignKey(Brand, on_delete=models.PROTECT, related_name='kategori_produks')

    parent_field = 'brand'
    parent_info_key = 'categoryName'

    class Meta:
        db_table = 'kategori_produks'
        ordering = ['-created_at']
        verbose_name = 'Kategori Produk'
        verbose_name_plural = 'Kategori Produk'


class SubkategoriProduk(AuthoredModel):
    """Product subcategories"""
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(null=True, blank=True)
    images = models.JSONField(default=list, blank=True)
    kategori_produk = models.ForeignKey(
        KategoriProduk, on_delete=models.PROTECT, related_name='subkategori_produks'
    )

    parent_field = 'kategori_produk'
    parent_info_key = 'subcategoryName'

    class Meta:
        db_table = 'subkategori_produks'
        ordering = ['-created_at']
        verbose_name = 'Subkategori Produk'
        verbose_name_plural = 'Subkategori Produk'


class Produk(AuthoredModel):
    """
    Product master.

    A product hangs off a subcategory or, when it has none, directly off a
    category. ``brand`` is denormalized from whichever of the two is set.
    """
    STATUS_ACTIVE = 'ACTIVE'
    STATUS_INACTIVE = 'INACTIVE'

    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(null=True, blank=True)
    kapasitas = models.CharField(max_length=255, null=True, blank=True)
    status = models.CharField(max_length=20, default=STATUS_ACTIVE)
    harga = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    images = models.JSONField(default=list, blank=True)
    subkategori_produk = models.ForeignKey(
        SubkategoriProduk, on_delete=models.PROTECT, null=True, blank=True, related_name='produks'
    )
    kategori_produk = models.ForeignKey(
        KategoriProduk, on_delete=models.PROTECT, null=True, blank=True, related_name='produks'
    )
    brand = models.ForeignKey(Brand, on_delete=models.SET_NULL, null=True, blank=True, related_name='produks')

    class Meta:
        db_table = 'produks'
        ordering = ['-created_at']
        verbose_name = 'Produk'
        verbose_name_plural = 'Produk'

    def get_audit_parent(self):
        return self.subkategori_produk or self.kategori_produk or self.brand

    def resolve_brand(self):
        """Brand implied by the subcategory or category"""
        if self.subkategori_produk_id:
            return self.subkategori_produk.kategori_produk.brand
        if self.kategori_produk_id:
            return self.kategori_produk.brand
        return self.brand


class DetailProduk(DashboardModel):
    """Name/value attribute line of a product"""
    name = models.CharField(max_length=255)
    value = models.TextField(null=True, blank=True)
    images = models.JSONField(default=list, blank=True)
    produk = models.ForeignKey(Produk, on_delete=models.CASCADE, related_name='detail_produks')

    parent_field = 'produk'

    class Meta:
        db_table = 'detail_produks'
        ordering = ['created_at']
        verbose_name = 'Detail Produk'
        verbose_name_plural = 'Detail Produk'

    def get_notification_record(self):
        return self.produk
