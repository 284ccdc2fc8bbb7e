from apps.common.repository import GenericRepository
from .models import Product


class ProductRepository(GenericRepository[Product]):
    def __init__(self):
        super().__init__(Product)

    def search(self, query: str):
        return self.model.objects.filter(name__icontains=query)
