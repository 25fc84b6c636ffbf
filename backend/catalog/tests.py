"""
Test suite for the Catalog module
Tests: brands, categories and subcategories, products and their details, image upload, brand backfill
"""
from io import StringIO
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from backend.core.exceptions import StorageError
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.catalog.models import Brand, KategoriProduk, SubkategoriProduk, Produk, DetailProduk


class BrandAPITests(TestCase):
    """Test brand endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_requires_admin_session(self):
        """Test brand list without a token"""
        self.client.logout()
        response = self.client.get('/api/v1/brands/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_brand(self):
        """Test creating a brand with the default color"""
        response = self.client.post('/api/v1/brands/', {
            'name': 'Acme',
            'description': 'Audio gear',
            'images': ['https://cdn.test/acme.png'],
            'colorbase': '',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['colorbase'], '#03438f')
        self.assertEqual(response.data['created_by'], self.user.email)
        self.assertEqual(response.data['kategori_produks'], [])

    def test_create_brand_requires_name(self):
        """Test creating a brand with a blank name"""
        response = self.client.post('/api/v1/brands/', {'name': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Name is required')

    def test_create_brand_duplicate_name(self):
        """Test brand names are unique"""
        TestDataFactory.create_brand(name='Acme')
        response = self.client.post('/api/v1/brands/', {'name': 'Acme'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Brand name already exists')

    def test_list_brands_with_hierarchy(self):
        """Test brands are listed with categories and subcategories"""
        subcategory = TestDataFactory.create_subcategory()
        response = self.client.get('/api/v1/brands/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        brand = response.data[0]
        self.assertEqual(brand['kategori_produks'][0]['name'], subcategory.kategori_produk.name)
        self.assertEqual(
            brand['kategori_produks'][0]['subkategori_produks'][0]['name'], subcategory.name
        )

    def test_update_brand(self):
        """Test updating a brand"""
        brand = TestDataFactory.create_brand(name='Old')
        response = self.client.put(f'/api/v1/brands/{brand.id}/', {
            'name': 'New',
            'colorbase': '#ffffff',
            'update_notes': 'rename',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        brand.refresh_from_db()
        self.assertEqual(brand.name, 'New')
        self.assertEqual(brand.colorbase, '#ffffff')
        self.assertEqual(brand.updated_by, self.user.email)

    def test_update_brand_to_taken_name(self):
        """Test renaming a brand to another brand's name"""
        TestDataFactory.create_brand(name='Taken')
        brand = TestDataFactory.create_brand(name='Mine')
        response = self.client.put(f'/api/v1/brands/{brand.id}/', {'name': 'Taken'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Brand name already exists')

    def test_delete_brand_with_categories(self):
        """Test a brand with categories cannot be deleted"""
        category = TestDataFactory.create_category()
        response = self.client.delete(f'/api/v1/brands/{category.brand_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot delete brand with associated categories')

    @mock.patch('backend.catalog.views.delete_files')
    def test_delete_brand_removes_images(self, delete_files):
        """Test deleting a brand also removes its stored images"""
        brand = TestDataFactory.create_brand(images=['https://cdn.test/a.png'])
        response = self.client.delete(f'/api/v1/brands/{brand.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Brand deleted successfully')
        self.assertFalse(Brand.objects.filter(pk=brand.pk).exists())
        self.assertEqual(delete_files.call_args[0][0], ['https://cdn.test/a.png'])

    def test_brand_not_found(self):
        """Test reading a missing brand"""
        response = self.client.get('/api/v1/brands/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Brand not found')


class CategoryAPITests(TestCase):
    """Test category and subcategory endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())
        self.brand = TestDataFactory.create_brand()

    def test_create_category(self):
        """Test creating a category under a brand"""
        response = self.client.post('/api/v1/categories/', {
            'name': 'Speakers', 'type': 'category', 'brand': str(self.brand.id),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(KategoriProduk.objects.get(name='Speakers').brand, self.brand)

    def test_create_category_requires_brand(self):
        """Test creating a category without a brand"""
        response = self.client.post('/api/v1/categories/', {'name': 'Speakers'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Brand is required for category')

    def test_create_subcategory(self):
        """Test creating a subcategory under a category"""
        category = TestDataFactory.create_category(brand=self.brand)
        response = self.client.post('/api/v1/categories/', {
            'name': 'Portable', 'type': 'subcategory', 'parent_category': str(category.id),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(SubkategoriProduk.objects.get(name='Portable').kategori_produk, category)

    def test_create_subcategory_requires_parent(self):
        """Test creating a subcategory without a parent"""
        response = self.client.post('/api/v1/categories/', {
            'name': 'Portable', 'type': 'subcategory',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Parent category is required for subcategory')

    def test_create_invalid_type(self):
        """Test creating with an unknown type"""
        response = self.client.post('/api/v1/categories/', {'name': 'X', 'type': 'shelf'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid type')

    def test_list_categories_and_subcategories(self):
        """Test the combined list"""
        subcategory = TestDataFactory.create_subcategory(
            category=TestDataFactory.create_category(brand=self.brand)
        )
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['categories'][0]['brand']['name'], self.brand.name)
        self.assertEqual(response.data['subcategories'][0]['id'], str(subcategory.id))
        self.assertEqual(response.data['subcategories'][0]['kategori_produk']['brand']['id'], str(self.brand.id))

    def test_get_reports_type(self):
        """Test a detail read says whether the record is a subcategory"""
        subcategory = TestDataFactory.create_subcategory()
        response = self.client.get(f'/api/v1/categories/{subcategory.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['type'], 'subcategory')

    def test_update_requires_notes_and_author(self):
        """Test an update without notes"""
        category = TestDataFactory.create_category(brand=self.brand)
        response = self.client.put(f'/api/v1/categories/{category.id}/', {
            'name': 'Renamed', 'type': 'category', 'brand': str(self.brand.id),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Update notes is required')

    def test_update_category(self):
        """Test moving a category to another brand"""
        category = TestDataFactory.create_category(brand=self.brand)
        other_brand = TestDataFactory.create_brand()
        response = self.client.put(f'/api/v1/categories/{category.id}/', {
            'name': 'Renamed',
            'type': 'category',
            'brand': str(other_brand.id),
            'update_notes': 'moved',
            'updated_by': 'editor@test.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        category.refresh_from_db()
        self.assertEqual(category.brand, other_brand)
        self.assertEqual(category.update_notes, 'moved')
        self.assertEqual(category.updated_by, 'editor@test.com')

    def test_delete_category_with_subcategories(self):
        """Test a category with subcategories cannot be deleted"""
        subcategory = TestDataFactory.create_subcategory()
        response = self.client.delete(
            f'/api/v1/categories/{subcategory.kategori_produk_id}/', {'type': 'category'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot delete category with associated subcategories')

    def test_delete_subcategory_with_products(self):
        """Test a subcategory with products cannot be deleted"""
        product = TestDataFactory.create_product()
        response = self.client.delete(
            f'/api/v1/categories/{product.subkategori_produk_id}/', {'type': 'subcategory'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot delete subcategory with associated products')

    def test_delete_category_with_direct_products(self):
        """Test a category holding products directly cannot be deleted"""
        category = TestDataFactory.create_category(brand=self.brand)
        TestDataFactory.create_product(category=category)
        response = self.client.delete(f'/api/v1/categories/{category.id}/', {'type': 'category'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot delete category with associated products')

    @mock.patch('backend.catalog.views.delete_files')
    def test_delete_empty_category(self, delete_files):
        """Test deleting an empty category"""
        category = TestDataFactory.create_category(brand=self.brand)
        response = self.client.delete(f'/api/v1/categories/{category.id}/', {'type': 'category'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(KategoriProduk.objects.filter(pk=category.pk).exists())


class ProductAPITests(TestCase):
    """Test product endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())
        self.subcategory = TestDataFactory.create_subcategory()
        self.category = self.subcategory.kategori_produk
        self.brand = self.category.brand

    def test_create_product_with_details(self):
        """Test creating a product under a subcategory with details"""
        response = self.client.post('/api/v1/products/', {
            'name': 'Speaker X',
            'subcategory': str(self.subcategory.id),
            'harga': '150000',
            'details': [
                {'name': 'Warna', 'value': 'Hitam'},
                {'name': '', 'value': 'ignored'},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['brand_id'], self.brand.id)
        self.assertEqual(response.data['status'], 'ACTIVE')
        self.assertEqual(len(response.data['detail_produks']), 1)
        self.assertEqual(response.data['detail_produks'][0]['value'], 'Hitam')

    def test_create_product_directly_under_category(self):
        """Test a subcategory of '-' places the product under the category"""
        response = self.client.post('/api/v1/products/', {
            'name': 'Cable',
            'subcategory': '-',
            'category': str(self.category.id),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = Produk.objects.get(name='Cable')
        self.assertIsNone(product.subkategori_produk)
        self.assertEqual(product.kategori_produk, self.category)
        self.assertEqual(product.brand, self.brand)

    def test_create_product_requires_placement(self):
        """Test creating a product with neither category nor subcategory"""
        response = self.client.post('/api/v1/products/', {'name': 'Loose'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Either category or subcategory is required')

    def test_create_product_unknown_subcategory(self):
        """Test creating a product under a missing subcategory"""
        response = self.client.post('/api/v1/products/', {
            'name': 'Loose', 'subcategory': '00000000-0000-0000-0000-000000000000',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Subcategory not found')

    def test_filter_products_by_brand(self):
        """Test the brand filter matches both placements"""
        TestDataFactory.create_product(subcategory=self.subcategory, name='Under sub')
        TestDataFactory.create_product(category=self.category, name='Under cat')
        TestDataFactory.create_product(name='Elsewhere')
        response = self.client.get('/api/v1/products/', {'brand_id': str(self.brand.id)})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({p['name'] for p in response.data}, {'Under sub', 'Under cat'})

    def test_search_products(self):
        """Test the search filter"""
        TestDataFactory.create_product(subcategory=self.subcategory, name='Blue Speaker')
        TestDataFactory.create_product(subcategory=self.subcategory, name='Red Cable')
        response = self.client.get('/api/v1/products/', {'search': 'speaker'})
        self.assertEqual([p['name'] for p in response.data], ['Blue Speaker'])

    def test_update_replaces_details(self):
        """Test a non-empty details list replaces the stored ones"""
        product = TestDataFactory.create_product(subcategory=self.subcategory)
        DetailProduk.objects.create(produk=product, name='Old', value='1')
        response = self.client.put(f'/api/v1/products/{product.id}/', {
            'name': 'Renamed',
            'subcategory': str(self.subcategory.id),
            'details': [{'name': 'New', 'value': '2'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(list(product.detail_produks.values_list('name', flat=True)), ['New'])

    def test_update_without_details_keeps_them(self):
        """Test an empty details list leaves the stored ones"""
        product = TestDataFactory.create_product(subcategory=self.subcategory)
        DetailProduk.objects.create(produk=product, name='Keep', value='1')
        response = self.client.put(f'/api/v1/products/{product.id}/', {
            'name': 'Renamed',
            'subcategory': str(self.subcategory.id),
            'details': [],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(product.detail_produks.count(), 1)

    @mock.patch('backend.catalog.views.delete_files')
    def test_delete_product_removes_all_images(self, delete_files):
        """Test deleting a product removes product and detail images"""
        product = TestDataFactory.create_product(subcategory=self.subcategory, images=['https://cdn.test/p.png'])
        DetailProduk.objects.create(produk=product, name='Foto', value='x', images=['https://cdn.test/d.png'])
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(delete_files.call_args[0][0], ['https://cdn.test/p.png', 'https://cdn.test/d.png'])
        self.assertFalse(DetailProduk.objects.exists())

    def test_add_detail(self):
        """Test adding a detail line"""
        product = TestDataFactory.create_product(subcategory=self.subcategory)
        response = self.client.post(f'/api/v1/products/{product.id}/details/', {
            'name': 'Daya', 'value': '20W',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(product.detail_produks.get().value, '20W')

    def test_add_detail_requires_value(self):
        """Test adding a detail without a value"""
        product = TestDataFactory.create_product(subcategory=self.subcategory)
        response = self.client.post(f'/api/v1/products/{product.id}/details/', {'name': 'Daya'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Name and value are required')

    @mock.patch('backend.catalog.views.delete_files')
    def test_delete_detail(self, delete_files):
        """Test deleting one detail line"""
        product = TestDataFactory.create_product(subcategory=self.subcategory)
        detail = DetailProduk.objects.create(produk=product, name='Daya', value='20W')
        response = self.client.delete(f'/api/v1/products/details/{detail.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(DetailProduk.objects.filter(pk=detail.pk).exists())


class UploadAPITests(TestCase):
    """Test product image upload"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_upload_requires_file_and_path(self):
        """Test upload without a path"""
        image = SimpleUploadedFile('a.png', b'png-bytes', content_type='image/png')
        response = self.client.post('/api/v1/upload/', {'file': image}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'File and path are required')

    @mock.patch('backend.catalog.views.upload_file', return_value='https://cdn.test/products/a.png')
    def test_upload(self, upload_file):
        """Test a successful upload returns the public URL"""
        image = SimpleUploadedFile('a.png', b'png-bytes', content_type='image/png')
        response = self.client.post('/api/v1/upload/', {'file': image, 'path': 'products'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'url': 'https://cdn.test/products/a.png'})
        self.assertEqual(upload_file.call_args[0][1], 'products')

    @mock.patch('backend.catalog.views.upload_file', side_effect=StorageError('Failed to upload file: boom'))
    def test_upload_storage_failure(self, upload_file):
        """Test storage failures surface as server errors"""
        image = SimpleUploadedFile('a.png', b'png-bytes', content_type='image/png')
        response = self.client.post('/api/v1/upload/', {'file': image, 'path': 'products'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Failed to upload file: boom')


class PopulateBrandIdCommandTests(TestCase):
    """Test the brand backfill command"""

    def setUp(self):
        self.subcategory = TestDataFactory.create_subcategory()
        self.product = Produk.objects.create(name='Orphan', subkategori_produk=self.subcategory)

    def test_dry_run_changes_nothing(self):
        """Test --dry-run only reports"""
        out = StringIO()
        call_command('populate_brand_id', '--dry-run', stdout=out)
        self.product.refresh_from_db()
        self.assertIsNone(self.product.brand)
        self.assertIn('Would update 1 of 1 products', out.getvalue())

    def test_backfills_brand(self):
        """Test the brand is copied from the subcategory's category"""
        out = StringIO()
        call_command('populate_brand_id', stdout=out)
        self.product.refresh_from_db()
        self.assertEqual(self.product.brand, self.subcategory.kategori_produk.brand)
