import logging
import os
import shutil
import time
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

import auth
import cart
import catalog
import config
import database
from auth import fetch_user
from errors import ShopError

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Shopper API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

os.makedirs(config.UPLOAD_DIR, exist_ok=True)
app.mount("/images", StaticFiles(directory=config.UPLOAD_DIR), name="images")


@app.exception_handler(ShopError)
async def shop_error_handler(request: Request, exc: ShopError):
    return JSONResponse(status_code=exc.status_code, content=exc.body())


@app.on_event("startup")
def prepare_database():
    if database.db is None:
        return
    database.ensure_indexes()


# Models for requests
class SignupRequest(BaseModel):
    username: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class CartItemRequest(BaseModel):
    itemId: int


class CartQuantityRequest(BaseModel):
    itemId: int
    quantity: int = Field(..., ge=0)


class RelatedProductsRequest(BaseModel):
    category: str


class ProductCreateRequest(BaseModel):
    name: str
    description: str
    image: str
    category: str
    new_price: Optional[float] = None
    old_price: Optional[float] = None
    available: bool = True


class ProductRemoveRequest(BaseModel):
    id: int
    name: Optional[str] = None


@app.get("/", response_class=PlainTextResponse)
def read_root():
    return "API Root"


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if config.DATABASE_URL else "❌ Not Set",
        "database_name": config.DATABASE_NAME,
        "connection_status": "Not Connected",
        "collections": [],
    }
    try:
        if database.db is not None:
            response["database"] = "✅ Connected"
            response["connection_status"] = "Connected"
            response["collections"] = database.db.list_collection_names()
    except Exception as e:
        logger.exception("Database check failed")
        response["database"] = f"⚠️ {str(e)[:80]}"
    return response


# Auth endpoints
@app.post("/signup")
def signup(payload: SignupRequest):
    token = auth.signup(payload.username, payload.email, payload.password)
    return {"success": True, "token": token}


@app.post("/login")
def login(payload: LoginRequest):
    token = auth.login(payload.email, payload.password)
    return {"success": True, "token": token}


@app.get("/getuser")
def get_user(user_id: str = Depends(fetch_user)):
    return auth.get_profile(user_id)


# Catalog endpoints
@app.get("/allproducts")
def all_products() -> List[dict]:
    return catalog.list_all()


@app.get("/newcollections")
def new_collections() -> List[dict]:
    return catalog.list_new_collections()


@app.get("/popularinwomen")
def popular_in_women() -> List[dict]:
    return catalog.list_popular_in_women()


@app.post("/relatedproducts")
def related_products(payload: RelatedProductsRequest) -> List[dict]:
    return catalog.list_related(payload.category)


@app.post("/addproduct")
def add_product(payload: ProductCreateRequest):
    product = catalog.add_product(payload.model_dump())
    return {"success": True, "name": product["name"]}


@app.post("/removeproduct")
def remove_product(payload: ProductRemoveRequest):
    name = catalog.remove_product(payload.id)
    return {"success": True, "name": name if name is not None else payload.name}


@app.post("/upload")
def upload_image(product: UploadFile = File(...)):
    ext = os.path.splitext(product.filename or "")[1]
    filename = f"product_{int(time.time() * 1000)}{ext}"
    with open(os.path.join(config.UPLOAD_DIR, filename), "wb") as out:
        shutil.copyfileobj(product.file, out)
    logger.info("Stored upload %s", filename)
    return {"success": 1, "image_url": f"/images/{filename}"}


# Cart endpoints
@app.post("/addtocart", response_class=PlainTextResponse)
def add_to_cart(payload: CartItemRequest, user_id: str = Depends(fetch_user)):
    cart.add_to_cart(user_id, payload.itemId)
    return "Added"


@app.post("/removefromcart", response_class=PlainTextResponse)
def remove_from_cart(payload: CartItemRequest, user_id: str = Depends(fetch_user)):
    cart.remove_from_cart(user_id, payload.itemId)
    return "Removed"


@app.post("/getcart")
def get_cart(user_id: str = Depends(fetch_user)):
    return cart.get_cart(user_id)


@app.post("/setcartquantity", response_class=PlainTextResponse)
def set_cart_quantity(payload: CartQuantityRequest, user_id: str = Depends(fetch_user)):
    cart.set_quantity(user_id, payload.itemId, payload.quantity)
    return "Updated"


@app.post("/clearcart", response_class=PlainTextResponse)
def clear_cart(user_id: str = Depends(fetch_user)):
    cart.clear_cart(user_id)
    return "Cleared"


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
