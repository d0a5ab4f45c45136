"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.catalog.models import Product
from backend.parties.models import Customer
from backend.orders.models import Order, OrderItem
from backend.payments.models import Payment
from backend.manufacturing.models import Recipe, RecipeItem, ProductionOrder
from decimal import Decimal
from django.utils import timezone
import random
import string
import uuid

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""
    __test__ = False

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_customer(name=None, phone=None, email=None):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'9{random.randint(100000000, 999999999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Customer.objects.create(
            name=name,
            phone=phone,
            email=email
        )

    @staticmethod
    def create_product(name=None, sku=None, price=None, cost_price=None, quantity_in_stock=0):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if not sku:
            sku = f'SKU_{TestDataFactory.random_string(8)}'
        return Product.objects.create(
            name=name,
            sku=sku,
            price=price if price is not None else Decimal('10.00'),
            cost_price=cost_price if cost_price is not None else Decimal('6.00'),
            quantity_in_stock=quantity_in_stock
        )

    @staticmethod
    def create_order(user, customer=None, items=None, status='pending', payment_status='pending'):
        """
        Create a test order directly in the database.

        `items` is a list of (product, quantity, unit_price) tuples.
        """
        if not customer:
            customer = TestDataFactory.create_customer()
        order_number = f"ORD-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
        while Order.objects.filter(order_number=order_number).exists():
            order_number = f"ORD-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
        order = Order.objects.create(
            order_number=order_number,
            user=user,
            customer=customer,
            status=status,
            payment_status=payment_status
        )
        for product, quantity, unit_price in items or []:
            item = OrderItem(order=order, product=product, quantity=quantity, unit_price=Decimal(unit_price))
            item.calculate_total()
            item.save()
        order.calculate_totals()
        order.save()
        return order

    @staticmethod
    def create_payment(order, amount, payment_method='cash', status='pending', user=None, transaction_id=None):
        """Create a test payment without going through the balance check"""
        return Payment.objects.create(
            order=order,
            amount=Decimal(amount),
            payment_method=payment_method,
            status=status,
            transaction_id=transaction_id,
            created_by=user
        )

    @staticmethod
    def create_recipe(product=None, name=None, items=None, output_quantity='1', yield_factor='1',
                      labor_cost='0.00', overhead_cost='0.00'):
        """Create a test recipe; `items` is a list of (product, quantity) tuples"""
        if not product:
            product = TestDataFactory.create_product()
        if not name:
            name = f'Recipe_{TestDataFactory.random_string(6)}'
        recipe = Recipe.objects.create(
            name=name,
            product=product,
            output_quantity=Decimal(output_quantity),
            yield_factor=Decimal(yield_factor),
            labor_cost=Decimal(labor_cost),
            overhead_cost=Decimal(overhead_cost)
        )
        for item_product, quantity in items or []:
            RecipeItem.objects.create(recipe=recipe, product=item_product, quantity=Decimal(quantity))
        return recipe

    @staticmethod
    def create_production_order(recipe=None, work_center='Line 1', planned_quantity='10', status='draft'):
        """Create a test production order"""
        if not recipe:
            recipe = TestDataFactory.create_recipe()
        return ProductionOrder.objects.create(
            recipe=recipe,
            work_center=work_center,
            planned_quantity=Decimal(planned_quantity),
            status=status
        )


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
