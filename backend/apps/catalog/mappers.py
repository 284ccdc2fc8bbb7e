from typing import Iterable, List

from .dtos import ProductDTO, ProductSnapshot
from .models import Product


class ProductMapper:
    @staticmethod
    def to_dto(product: Product) -> ProductDTO:
        return ProductDTO(
            id=product.id,
            name=product.name,
            price=product.price,
            description=product.description,
            image=product.image,
            stock=product.stock,
        )

    @staticmethod
    def many_to_dto(products: Iterable[Product]) -> List[ProductDTO]:
        return [ProductMapper.to_dto(p) for p in products]

    @staticmethod
    def to_snapshot(product: Product) -> ProductSnapshot:
        return ProductSnapshot(
            product_id=product.id,
            name=product.name,
            price=product.price,
            image=product.image or None,
        )
