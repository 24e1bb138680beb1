# phonedeals/services/serializers.py
"""
Read-side projections shared by the services.
Plain dicts, validated by the response models in the routers.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict

from phonedeals.data.models.order import OrderModel
from phonedeals.data.models.phone import PhoneModel, ReviewModel
from phonedeals.data.models.user import UserModel


def user_brief(user: UserModel | None) -> Dict[str, Any] | None:
    if user is None:
        return None
    return {
        "id": user.id,
        "firstname": user.firstname,
        "lastname": user.lastname,
        "email": user.email,
    }


def phone_summary(phone: PhoneModel | None) -> Dict[str, Any] | None:
    if phone is None:
        return None
    return {
        "id": phone.id,
        "title": phone.title,
        "brand": phone.brand,
        "image": phone.image,
        "price": phone.price,
        "stock": phone.stock,
    }


def phone_out(phone: PhoneModel, with_seller: bool = True) -> Dict[str, Any]:
    return {
        **phone_summary(phone),
        "status": phone.status,
        "seller": user_brief(phone.seller) if with_seller else None,
        "created_at": phone.created_at,
    }


def review_out(review: ReviewModel) -> Dict[str, Any]:
    return {
        "id": review.id,
        "reviewer": user_brief(review.reviewer),
        "rating": review.rating,
        "comment": review.comment,
        "hidden": review.is_hidden,
        "created_at": review.created_at,
    }


def order_out(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user": user_brief(order.user),
        "items": [
            {
                "phone_id": item.phone_id,
                "phone": (
                    {
                        "id": item.phone.id,
                        "title": item.phone.title,
                        "brand": item.phone.brand,
                        "price": item.phone.price,
                    }
                    if item.phone is not None
                    else None
                ),
                "quantity": item.quantity,
                "price": item.price,
            }
            for item in order.items
        ],
        "total_amount": order.total_amount,
        "status": order.status,
        "payment_method": order.payment_method,
        "note": order.note,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
