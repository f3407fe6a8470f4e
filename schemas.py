"""
Database Schemas for the e-commerce backend

Each Pydantic model represents a MongoDB collection. The collection name is the lowercase of the class name.

- Product -> "product"
- User -> "user"
"""
from datetime import datetime, timezone
from typing import Dict, Optional
from pydantic import BaseModel, Field

CART_SLOTS = 200


def empty_cart() -> Dict[str, int]:
    """Zero-initialised cart handed out at signup: keys "0".."199" """
    return {str(i): 0 for i in range(CART_SLOTS)}


class Product(BaseModel):
    id: int = Field(..., description="Sequential numeric product id")
    name: str = Field(..., description="Product name")
    image: str = Field(..., description="Image URL")
    category: str = Field(..., description="Product category")
    new_price: float = Field(..., description="Current price")
    old_price: float = Field(..., description="Price before discount")
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Creation time")
    inStock: bool = Field(True, description="Whether product is in stock")


class User(BaseModel):
    name: Optional[str] = Field(None, description="Display name")
    email: str = Field(..., description="Email address, matched exactly")
    password: str = Field(..., description="Password as supplied at signup")
    cartData: Optional[Dict[str, int]] = Field(default_factory=empty_cart, description="Item id -> quantity")
