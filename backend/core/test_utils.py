"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.agents.models import Agent, Performance
from backend.announcements.models import Announcement
from backend.catalog.models import Brand, KategoriProduk, SubkategoriProduk, Produk
from backend.knowledge.models import Knowledge
from backend.quality_training.models import QualityTraining
from backend.sop.models import KategoriSOP, SOP, JenisSOP
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password='testpass123', name=None, role=User.ROLE_ADMIN):
        """Create a test user"""
        if not email:
            email = f'user_{TestDataFactory.random_string(6).lower()}@test.com'
        return User.objects.create_user(
            email=email,
            password=password,
            name=name or f'User {TestDataFactory.random_string(4)}',
            role=role,
        )

    @staticmethod
    def create_super_admin(email=None, password='testpass123'):
        """Create a test super admin"""
        return TestDataFactory.create_user(
            email=email, password=password, name='Super Admin', role=User.ROLE_SUPER_ADMIN
        )

    @staticmethod
    def create_brand(name=None, description=None, images=None):
        """Create a test brand"""
        if not name:
            name = f'Brand_{TestDataFactory.random_string(6)}'
        return Brand.objects.create(
            name=name,
            description=description or f'Test brand {name}',
            images=images or [],
        )

    @staticmethod
    def create_category(brand=None, name=None):
        """Create a test category"""
        if not brand:
            brand = TestDataFactory.create_brand()
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return KategoriProduk.objects.create(name=name, brand=brand)

    @staticmethod
    def create_subcategory(category=None, name=None):
        """Create a test subcategory"""
        if not category:
            category = TestDataFactory.create_category()
        if not name:
            name = f'Subcategory_{TestDataFactory.random_string(6)}'
        return SubkategoriProduk.objects.create(name=name, kategori_produk=category)

    @staticmethod
    def create_product(subcategory=None, category=None, name=None, images=None):
        """Create a test product under a subcategory, or directly under a category"""
        if not subcategory and not category:
            subcategory = TestDataFactory.create_subcategory()
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        product = Produk(
            name=name,
            subkategori_produk=subcategory,
            kategori_produk=category,
            images=images or [],
        )
        product.brand = product.resolve_brand()
        product.save()
        return product

    @staticmethod
    def create_kategori_sop(name=None):
        """Create a test SOP category"""
        if not name:
            name = f'KategoriSOP_{TestDataFactory.random_string(6)}'
        return KategoriSOP.objects.create(name=name)

    @staticmethod
    def create_sop(kategori_sop=None, name=None):
        """Create a test SOP"""
        if not kategori_sop:
            kategori_sop = TestDataFactory.create_kategori_sop()
        if not name:
            name = f'SOP_{TestDataFactory.random_string(6)}'
        return SOP.objects.create(name=name, kategori_sop=kategori_sop)

    @staticmethod
    def create_jenis_sop(sop=None, name=None):
        """Create a test SOP type"""
        if not sop:
            sop = TestDataFactory.create_sop()
        if not name:
            name = f'JenisSOP_{TestDataFactory.random_string(6)}'
        return JenisSOP.objects.create(name=name, content='Langkah kerja', sop=sop)

    @staticmethod
    def create_quality_training(title=None):
        """Create a test quality training"""
        if not title:
            title = f'QT_{TestDataFactory.random_string(6)}'
        return QualityTraining.objects.create(title=title, description='Training')

    @staticmethod
    def create_knowledge(title=None, logos=None):
        """Create a test knowledge entry"""
        if not title:
            title = f'Knowledge_{TestDataFactory.random_string(6)}'
        return Knowledge.objects.create(title=title, description='Knowledge', logos=logos or [])

    @staticmethod
    def create_agent(email=None, name=None, password='agentpass', category=Agent.CATEGORY_SOCIAL_MEDIA):
        """Create a test agent"""
        if not email:
            email = f'agent_{TestDataFactory.random_string(6).lower()}@test.com'
        agent = Agent(name=name or f'Agent {TestDataFactory.random_string(4)}', email=email, category=category)
        agent.set_password(password)
        agent.save()
        return agent

    @staticmethod
    def create_performance(agent=None, timestamp=None, **scores):
        """Create a test performance row"""
        if not agent:
            agent = TestDataFactory.create_agent()
        return Performance.objects.create(agent=agent, timestamp=timestamp or timezone.now(), **scores)

    @staticmethod
    def create_announcement(judul=None, image=None):
        """Create a test announcement"""
        if not judul:
            judul = f'Announcement_{TestDataFactory.random_string(6)}'
        return Announcement.objects.create(judul=judul, deskripsi='Pengumuman', image=image or [])


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
