"""
Test suite for manufacturing workflows
Tests: recipe costing, production orders, material issue, output receipt and the API
"""
from datetime import date, datetime
from decimal import Decimal
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from backend.core.exceptions import InvalidArgument, NotFound
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import StockAdjustment
from .models import Batch, MaterialIssue, ProductionOrder, ProductionOutput, Recipe
from . import services


class RecipeTests(TestCase):
    """Test recipe costing, duplication and completion tracking"""

    def setUp(self):
        self.flour = TestDataFactory.create_product(cost_price=Decimal('6.00'))
        self.sugar = TestDataFactory.create_product(cost_price=Decimal('3.00'))
        self.recipe = TestDataFactory.create_recipe(
            name='Sponge Cake',
            items=[(self.flour, '2'), (self.sugar, '1')],
            output_quantity='10',
            labor_cost='1.50',
            overhead_cost='0.50'
        )

    def test_estimated_cost(self):
        self.assertEqual(self.recipe.estimated_cost(), Decimal('17.0000'))

    def test_estimated_cost_with_yield(self):
        Recipe.objects.filter(pk=self.recipe.pk).update(yield_factor=Decimal('0.5'))
        self.recipe.refresh_from_db()
        self.assertEqual(self.recipe.estimated_cost(), Decimal('32.0000'))

    def test_zero_yield_counts_as_one(self):
        Recipe.objects.filter(pk=self.recipe.pk).update(yield_factor=Decimal('0'))
        self.recipe.refresh_from_db()
        self.assertEqual(self.recipe.estimated_cost(), Decimal('17.0000'))

    def test_completion_percentage(self):
        self.assertEqual(self.recipe.completion_percentage(0), Decimal('0.00'))
        services.add_completed_quantity(self.recipe.id, '5')
        self.recipe.refresh_from_db()
        self.assertEqual(self.recipe.completion_percentage(2), Decimal('25.00'))

    def test_completed_quantity_must_be_positive(self):
        with self.assertRaises(InvalidArgument):
            services.add_completed_quantity(self.recipe.id, '0')
        with self.assertRaises(NotFound):
            services.add_completed_quantity(999999, '1')

    def test_duplicate_recipe(self):
        copy = services.duplicate_recipe(self.recipe.id)
        self.assertNotEqual(copy.id, self.recipe.id)
        self.assertEqual(copy.name, 'Copy of Sponge Cake')
        self.assertEqual(copy.product, self.recipe.product)
        self.assertEqual(
            [(item.product_id, item.quantity) for item in copy.items.all()],
            [(self.flour.id, Decimal('2.0000')), (self.sugar.id, Decimal('1.0000'))]
        )
        self.assertEqual(self.recipe.items.count(), 2)


class ProductionOrderTests(TestCase):
    """Test production order creation, status changes and search"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.recipe = TestDataFactory.create_recipe()

    def test_new_order_is_draft(self):
        order = services.create_production_order(self.recipe.id, 'Line 2', Decimal('40'), user=self.user)
        self.assertEqual(order.status, 'draft')
        self.assertEqual(order.produced_quantity, Decimal('0'))
        self.assertEqual(order.created_by, self.user)

    def test_unknown_recipe(self):
        with self.assertRaises(NotFound):
            services.create_production_order(999999, 'Line 2', Decimal('1'))

    def test_any_status_may_follow_any_other(self):
        order = TestDataFactory.create_production_order(self.recipe)
        services.change_order_status(order.id, 'CLOSED')
        order = services.change_order_status(order.id, 'draft')
        self.assertEqual(order.status, 'draft')
        self.assertEqual(AuditLog.objects.filter(action='production_status').count(), 2)

    def test_unknown_status(self):
        order = TestDataFactory.create_production_order(self.recipe)
        with self.assertRaises(InvalidArgument):
            services.change_order_status(order.id, 'paused')

    def test_search(self):
        draft = TestDataFactory.create_production_order(self.recipe)
        released = TestDataFactory.create_production_order(self.recipe, status='released')
        old = TestDataFactory.create_production_order(self.recipe, status='released')
        ProductionOrder.objects.filter(pk=old.pk).update(created_at=timezone.make_aware(datetime(2023, 1, 10, 12, 0)))

        self.assertEqual(
            [order.id for order in services.search_production_orders()],
            [released.id, draft.id, old.id]
        )
        self.assertEqual(
            [order.id for order in services.search_production_orders(status='RELEASED')],
            [released.id, old.id]
        )
        self.assertEqual(
            [order.id for order in services.search_production_orders(start_date='2023-01-10', end_date='2023-01-10')],
            [old.id]
        )


class IssueMaterialsTests(TestCase):
    """Test issue_materials"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.flour = TestDataFactory.create_product(quantity_in_stock=10)
        self.sugar = TestDataFactory.create_product(quantity_in_stock=3)
        self.order = TestDataFactory.create_production_order()

    def test_issue_records_lines_and_decrements_stock(self):
        services.issue_materials(self.order.id, [
            {'product': self.flour.id, 'quantity': Decimal('2.5'), 'batch_number': 'FL-1', 'expiry_date': date(2030, 1, 1)},
            {'product': self.sugar.id, 'quantity': Decimal('1')},
        ], user=self.user)

        issues = list(MaterialIssue.objects.filter(production_order=self.order))
        self.assertEqual(len(issues), 2)
        self.assertEqual(issues[0].quantity, Decimal('2.5000'))
        self.assertEqual(issues[0].batch_number, 'FL-1')

        self.flour.refresh_from_db()
        self.sugar.refresh_from_db()
        self.assertEqual(self.flour.quantity_in_stock, 8)
        self.assertEqual(self.sugar.quantity_in_stock, 2)

        adjustment = StockAdjustment.objects.get(product=self.flour)
        self.assertEqual(adjustment.reason, 'material_issue')
        self.assertEqual(adjustment.reference, f'PO-{self.order.id}')
        self.assertEqual(adjustment.delta, -2)

    def test_repeated_product_lines_net_to_the_sum(self):
        services.issue_materials(self.order.id, [
            {'product': self.flour.id, 'quantity': Decimal('3'), 'batch_number': 'FL-1'},
            {'product': self.flour.id, 'quantity': Decimal('4.9'), 'batch_number': 'FL-2'},
        ], user=self.user)

        self.flour.refresh_from_db()
        self.assertEqual(self.flour.quantity_in_stock, 3)
        self.assertEqual(MaterialIssue.objects.filter(production_order=self.order, product=self.flour).count(), 2)

        adjustments = StockAdjustment.objects.filter(product=self.flour, reason='material_issue').order_by('id')
        self.assertEqual([adjustment.delta for adjustment in adjustments], [-3, -4])
        self.assertEqual([adjustment.quantity_after for adjustment in adjustments], [7, 3])

    def test_fractional_quantity_below_one_moves_no_stock(self):
        services.issue_materials(self.order.id, [{'product': self.flour.id, 'quantity': Decimal('0.4')}])
        self.flour.refresh_from_db()
        self.assertEqual(self.flour.quantity_in_stock, 10)
        self.assertEqual(MaterialIssue.objects.count(), 1)
        self.assertEqual(StockAdjustment.objects.count(), 0)

    def test_invalid_requests(self):
        with self.assertRaises(InvalidArgument):
            services.issue_materials(self.order.id, [])
        with self.assertRaises(InvalidArgument):
            services.issue_materials(self.order.id, [{'product': self.flour.id, 'quantity': Decimal('-1')}])
        with self.assertRaises(NotFound):
            services.issue_materials(999999, [{'product': self.flour.id, 'quantity': Decimal('1')}])

    def test_unknown_product_writes_nothing(self):
        with self.assertRaises(NotFound):
            services.issue_materials(self.order.id, [
                {'product': self.flour.id, 'quantity': Decimal('1')},
                {'product': 999999, 'quantity': Decimal('1')},
            ])
        self.assertEqual(MaterialIssue.objects.count(), 0)
        self.flour.refresh_from_db()
        self.assertEqual(self.flour.quantity_in_stock, 10)

    @override_settings(INVENTORY_ALLOW_NEGATIVE_STOCK=False)
    def test_insufficient_stock_writes_nothing(self):
        with self.assertRaises(InvalidArgument):
            services.issue_materials(self.order.id, [
                {'product': self.flour.id, 'quantity': Decimal('5')},
                {'product': self.sugar.id, 'quantity': Decimal('2')},
                {'product': self.sugar.id, 'quantity': Decimal('2')},
            ])
        self.assertEqual(MaterialIssue.objects.count(), 0)
        self.assertEqual(StockAdjustment.objects.count(), 0)
        self.flour.refresh_from_db()
        self.sugar.refresh_from_db()
        self.assertEqual(self.flour.quantity_in_stock, 10)
        self.assertEqual(self.sugar.quantity_in_stock, 3)


class ReceiveOutputTests(TestCase):
    """Test receive_output"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.cake = TestDataFactory.create_product(quantity_in_stock=0)
        self.order = TestDataFactory.create_production_order(TestDataFactory.create_recipe(product=self.cake))

    def test_output_updates_order_batches_and_stock(self):
        order = services.receive_output(self.order.id, [
            {'product': self.cake.id, 'quantity': Decimal('4'), 'batch_number': ' B-100 ',
             'production_date': date(2024, 5, 1), 'expiry_date': date(2024, 6, 1)},
            {'product': self.cake.id, 'quantity': Decimal('1.5'), 'batch_number': '  '},
            {'product': self.cake.id, 'quantity': Decimal('2')},
        ], user=self.user)

        self.assertEqual(order.produced_quantity, Decimal('7.5'))
        self.assertEqual(ProductionOutput.objects.filter(production_order=self.order).count(), 3)

        batches = list(Batch.objects.all())
        self.assertEqual(len(batches), 1)
        self.assertEqual(batches[0].batch_number, 'B-100')
        self.assertEqual(batches[0].production_order_id, self.order.id)
        self.assertEqual(batches[0].expiry_date, date(2024, 6, 1))

        self.cake.refresh_from_db()
        self.assertEqual(self.cake.quantity_in_stock, 7)
        self.assertEqual(
            sorted(StockAdjustment.objects.filter(reason='production_output').values_list('quantity', flat=True)),
            [1, 2, 4]
        )

    def test_repeated_product_lines_with_one_batch(self):
        order = services.receive_output(self.order.id, [
            {'product': self.cake.id, 'quantity': Decimal('6'), 'batch_number': 'B-200'},
            {'product': self.cake.id, 'quantity': Decimal('3')},
        ])

        self.assertEqual(order.produced_quantity, Decimal('9'))
        self.assertEqual(ProductionOutput.objects.filter(production_order=self.order, product=self.cake).count(), 2)
        self.assertEqual(list(Batch.objects.values_list('batch_number', flat=True)), ['B-200'])

        self.cake.refresh_from_db()
        self.assertEqual(self.cake.quantity_in_stock, 9)
        adjustments = StockAdjustment.objects.filter(product=self.cake, reason='production_output').order_by('id')
        self.assertEqual([adjustment.delta for adjustment in adjustments], [6, 3])

    def test_produced_quantity_accumulates(self):
        services.receive_output(self.order.id, [{'product': self.cake.id, 'quantity': Decimal('3')}])
        order = services.receive_output(self.order.id, [{'product': self.cake.id, 'quantity': Decimal('2')}])
        self.assertEqual(order.produced_quantity, Decimal('5'))

    def test_unknown_product_writes_nothing(self):
        with self.assertRaises(NotFound):
            services.receive_output(self.order.id, [
                {'product': self.cake.id, 'quantity': Decimal('1'), 'batch_number': 'B-1'},
                {'product': 999999, 'quantity': Decimal('1')},
            ])
        self.order.refresh_from_db()
        self.assertEqual(self.order.produced_quantity, Decimal('0'))
        self.assertEqual(ProductionOutput.objects.count(), 0)
        self.assertEqual(Batch.objects.count(), 0)


class ManufacturingAPITests(TestCase):
    """Test manufacturing API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.output_product = TestDataFactory.create_product(quantity_in_stock=0)
        self.material = TestDataFactory.create_product(cost_price=Decimal('2.00'), quantity_in_stock=20)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_and_update_recipe(self):
        data = {
            'name': 'Bread',
            'product': self.output_product.id,
            'output_quantity': '10',
            'labor_cost': '1.00',
            'items': [{'product': self.material.id, 'quantity': '3', 'uom': 'kg'}]
        }
        response = self.client.post('/api/v1/manufacturing/recipes/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['estimated_cost'], '7.0000')
        self.assertEqual(response.data['completion_percentage'], '0.00')

        recipe_id = response.data['id']
        response = self.client.patch(f'/api/v1/manufacturing/recipes/{recipe_id}/', {
            'items': [{'product': self.material.id, 'quantity': '1'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['items'][0]['quantity'], '1.0000')

    def test_recipe_in_use_cannot_be_deleted(self):
        recipe = TestDataFactory.create_recipe(product=self.output_product)
        TestDataFactory.create_production_order(recipe)
        response = self.client.delete(f'/api/v1/manufacturing/recipes/{recipe.id}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        unused = TestDataFactory.create_recipe(product=self.output_product)
        response = self.client.delete(f'/api/v1/manufacturing/recipes/{unused.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_production_flow(self):
        recipe = TestDataFactory.create_recipe(product=self.output_product, items=[(self.material, '2')])
        response = self.client.post('/api/v1/manufacturing/orders/', {
            'recipe': recipe.id, 'work_center': 'Oven 1', 'planned_quantity': '5'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'draft')
        order_id = response.data['id']

        response = self.client.patch(f'/api/v1/manufacturing/orders/{order_id}/status/',
                                     {'status': 'In_Progress'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'in_progress')

        response = self.client.post(f'/api/v1/manufacturing/orders/{order_id}/issue/', {
            'items': [{'product': self.material.id, 'quantity': '10'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['material_issues']), 1)

        response = self.client.post(f'/api/v1/manufacturing/orders/{order_id}/output/', {
            'items': [{'product': self.output_product.id, 'quantity': '5', 'batch_number': 'LOT-7'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['produced_quantity'], '5.0000')
        self.assertEqual([batch['batch_number'] for batch in response.data['batches']], ['LOT-7'])

        self.material.refresh_from_db()
        self.output_product.refresh_from_db()
        self.assertEqual(self.material.quantity_in_stock, 10)
        self.assertEqual(self.output_product.quantity_in_stock, 5)

    def test_issue_requires_items(self):
        order = TestDataFactory.create_production_order()
        response = self.client.post(f'/api/v1/manufacturing/orders/{order.id}/issue/', {'items': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_page_endpoint(self):
        recipe = TestDataFactory.create_recipe(product=self.output_product)
        TestDataFactory.create_production_order(recipe, status='completed')
        TestDataFactory.create_production_order(recipe)
        response = self.client.get('/api/v1/manufacturing/orders/page/', {'status': 'completed', 'size': 10})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['status'], 'completed')

        response = self.client.get('/api/v1/manufacturing/orders/page/', {'status': 'paused'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
