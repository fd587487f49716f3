"""Storefront product snapshot and its local/remote representations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


CATEGORIES = {"apparel", "accessory"}


@dataclass
class Product:
    id: str
    name: str
    price: float
    category: str = "apparel"
    images: List[str] = field(default_factory=list)
    description: str = ""
    is_featured: bool = False
    sizes: Optional[List[str]] = None
    size_inventory: Optional[Dict[str, int]] = None
    nft: Optional[Dict[str, Any]] = None
    archived: bool = False
    archived_at: Optional[str] = None
    released_at: Optional[str] = None
    sold_at: Optional[str] = None
    is_limited_edition: bool = False
    sale_end_date: Optional[str] = None
    updated_at: Optional[str] = None

    # ------------------------------------------------------------------
    # Local JSON (camelCase, same shape the web client keeps in storage)
    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "category": self.category,
            "images": list(self.images),
            "description": self.description,
            "isFeatured": self.is_featured,
            "sizes": list(self.sizes) if self.sizes is not None else None,
            "sizeInventory": dict(self.size_inventory) if self.size_inventory is not None else None,
            "nft": self.nft,
            "archived": self.archived,
            "archivedAt": self.archived_at,
            "releasedAt": self.released_at,
            "soldAt": self.sold_at,
            "isLimitedEdition": self.is_limited_edition,
            "saleEndDate": self.sale_end_date,
            "updatedAt": self.updated_at,
        }
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        if not isinstance(data, dict):
            raise ValueError("product payload must be an object")
        product_id = data.get("id")
        if not product_id:
            raise ValueError("product payload has no id")
        return cls(
            id=str(product_id),
            name=str(data.get("name") or ""),
            price=float(data.get("price") or 0),
            category=data.get("category") or "apparel",
            images=list(data.get("images") or []),
            description=data.get("description") or "",
            is_featured=bool(data.get("isFeatured", False)),
            sizes=data.get("sizes"),
            size_inventory=data.get("sizeInventory"),
            nft=data.get("nft"),
            archived=bool(data.get("archived", False)),
            archived_at=data.get("archivedAt"),
            released_at=data.get("releasedAt"),
            sold_at=data.get("soldAt"),
            is_limited_edition=bool(data.get("isLimitedEdition", False)),
            sale_end_date=data.get("saleEndDate"),
            updated_at=data.get("updatedAt"),
        )

    # ------------------------------------------------------------------
    # Remote ``products`` table
    def to_db_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "category": self.category,
            "images": list(self.images),
            "description": self.description,
            "is_featured": self.is_featured,
            "sizes": self.sizes,
            "size_inventory": self.size_inventory or {},
            "nft_metadata": self.nft,
            "archived": self.archived or False,
            "archived_at": self.archived_at,
            "released_at": self.released_at,
            "sold_at": self.sold_at,
        }

    @classmethod
    def from_db_row(cls, row: Dict[str, Any]) -> "Product":
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            price=float(row.get("price") or 0),
            category=row.get("category") or "apparel",
            images=list(row.get("images") or []),
            description=row.get("description") or "",
            is_featured=bool(row.get("is_featured")),
            sizes=row.get("sizes"),
            size_inventory=row.get("size_inventory") or {},
            nft=row.get("nft_metadata"),
            archived=bool(row.get("archived")),
            archived_at=row.get("archived_at"),
            released_at=row.get("released_at"),
            sold_at=row.get("sold_at"),
            is_limited_edition=bool(row.get("is_limited_edition")),
            sale_end_date=row.get("sale_end_date"),
            updated_at=row.get("updated_at"),
        )


__all__ = ["CATEGORIES", "Product"]
