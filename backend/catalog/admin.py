from django.contrib import admin
from .models import Brand, KategoriProduk, SubkategoriProduk, Produk, DetailProduk


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ['name', 'colorbase', 'created_by', 'created_at']
    search_fields = ['name']
    ordering = ['name']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(KategoriProduk)
class KategoriProdukAdmin(admin.ModelAdmin):
    list_display = ['name', 'brand', 'created_at']
    list_filter = ['brand']
    search_fields = ['name', 'brand__name']
    ordering = ['name']


@admin.register(SubkategoriProduk)
class SubkategoriProdukAdmin(admin.ModelAdmin):
    list_display = ['name', 'kategori_produk', 'created_at']
    list_filter = ['kategori_produk__brand']
    search_fields = ['name', 'kategori_produk__name']
    ordering = ['name']


class DetailProdukInline(admin.TabularInline):
    model = DetailProduk
    extra = 0
    fields = ['name', 'value']


@admin.register(Produk)
class ProdukAdmin(admin.ModelAdmin):
    list_display = ['name', 'brand', 'kategori_produk', 'subkategori_produk', 'status', 'harga', 'created_at']
    list_filter = ['status', 'brand', 'created_at']
    search_fields = ['name', 'description', 'kapasitas']
    ordering = ['name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [DetailProdukInline]
