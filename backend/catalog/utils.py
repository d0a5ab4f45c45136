"""
Utility functions for catalog operations
"""
from django.utils import timezone
import uuid
from backend.catalog.models import Product


def generate_unique_sku(base_name=None):
    """Generate a unique SKU"""
    prefix = base_name[:4].upper().replace(' ', '') if base_name else 'PRD'
    timestamp = timezone.now().strftime('%Y%m%d')
    unique_id = str(uuid.uuid4())[:8].upper()
    sku = f"{prefix}-{timestamp}-{unique_id}"

    # Ensure uniqueness
    while Product.objects.filter(sku=sku).exists():
        unique_id = str(uuid.uuid4())[:8].upper()
        sku = f"{prefix}-{timestamp}-{unique_id}"

    return sku
