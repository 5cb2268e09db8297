from pydantic import BaseModel, Field, EmailStr
from typing import Dict, Optional

# Each class name determines collection name (lowercased)

class User(BaseModel):
    name: str = Field(..., description="Display name")
    email: EmailStr
    password_hash: str = Field(..., description="Salted password hash")
    cartData: Dict[str, int] = Field(default_factory=dict, description="product id -> quantity, absent ids mean 0")

class Product(BaseModel):
    id: int = Field(..., description="Sequential product id (max + 1)")
    name: str
    description: str
    image: str = Field(..., description="Image path, usually /images/<file>")
    category: str
    new_price: Optional[float] = None
    old_price: Optional[float] = None
    available: bool = True
