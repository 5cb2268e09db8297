import random

import pytest

import auth
import cart
from errors import UnknownUser


def get_cart(test_client, headers):
    response = test_client.post("/getcart", headers=headers)
    assert response.status_code == 200
    return response.json()


class TestCartEndpoints:
    def test_new_user_has_empty_cart(self, test_client, auth_headers):
        assert get_cart(test_client, auth_headers) == {}

    def test_add_to_cart_increments(self, test_client, auth_headers):
        first = test_client.post("/addtocart", json={"itemId": 7}, headers=auth_headers)
        test_client.post("/addtocart", json={"itemId": 7}, headers=auth_headers)

        assert first.status_code == 200
        assert first.text == "Added"
        assert get_cart(test_client, auth_headers) == {"7": 2}

    def test_add_does_not_check_product_exists(self, test_client, auth_headers):
        test_client.post("/addtocart", json={"itemId": 4242}, headers=auth_headers)

        assert get_cart(test_client, auth_headers) == {"4242": 1}

    def test_remove_from_cart_decrements(self, test_client, auth_headers):
        for _ in range(3):
            test_client.post("/addtocart", json={"itemId": 2}, headers=auth_headers)

        response = test_client.post("/removefromcart", json={"itemId": 2}, headers=auth_headers)

        assert response.text == "Removed"
        assert get_cart(test_client, auth_headers) == {"2": 2}

    def test_remove_never_goes_negative(self, test_client, auth_headers):
        test_client.post("/addtocart", json={"itemId": 2}, headers=auth_headers)
        test_client.post("/removefromcart", json={"itemId": 2}, headers=auth_headers)
        response = test_client.post("/removefromcart", json={"itemId": 2}, headers=auth_headers)
        test_client.post("/removefromcart", json={"itemId": 9}, headers=auth_headers)

        assert response.status_code == 200
        assert get_cart(test_client, auth_headers) == {"2": 0}

    def test_clear_cart_empties_map_in_one_call(self, test_client, auth_headers):
        for item_id in (1, 1, 3, 5):
            test_client.post("/addtocart", json={"itemId": item_id}, headers=auth_headers)

        response = test_client.post("/clearcart", headers=auth_headers)

        assert response.text == "Cleared"
        assert get_cart(test_client, auth_headers) == {}

    def test_set_quantity(self, test_client, auth_headers):
        test_client.post("/addtocart", json={"itemId": 1}, headers=auth_headers)
        test_client.post("/setcartquantity", json={"itemId": 3, "quantity": 5}, headers=auth_headers)
        response = test_client.post("/setcartquantity", json={"itemId": 1, "quantity": 0}, headers=auth_headers)

        assert response.text == "Updated"
        assert get_cart(test_client, auth_headers) == {"3": 5}

    def test_set_negative_quantity_is_rejected(self, test_client, auth_headers):
        response = test_client.post("/setcartquantity", json={"itemId": 3, "quantity": -1}, headers=auth_headers)

        assert response.status_code == 422

    def test_carts_are_per_user(self, test_client, auth_headers):
        other = test_client.post(
            "/signup",
            json={"username": "Sam", "email": "sam@example.com", "password": "pw"},
        ).json()["token"]

        test_client.post("/addtocart", json={"itemId": 1}, headers=auth_headers)

        assert get_cart(test_client, {"auth-token": other}) == {}


class TestCartService:
    def test_quantity_is_adds_minus_removes_clamped_at_zero(self, token):
        user_id = auth.decode_token(token)
        rng = random.Random(1234)
        expected = 0

        for _ in range(200):
            if rng.random() < 0.45:
                cart.add_to_cart(user_id, 11)
                expected += 1
            else:
                cart.remove_from_cart(user_id, 11)
                expected = max(expected - 1, 0)
            assert cart.get_cart(user_id).get("11", 0) == expected

    def test_add_returns_new_quantity(self, token):
        user_id = auth.decode_token(token)

        assert cart.add_to_cart(user_id, 5) == 1
        assert cart.add_to_cart(user_id, 5) == 2
        assert cart.remove_from_cart(user_id, 5) == 1

    def test_set_quantity_rejects_negative(self, token):
        with pytest.raises(ValueError):
            cart.set_quantity(auth.decode_token(token), 1, -3)

    def test_unknown_user(self):
        with pytest.raises(UnknownUser):
            cart.get_cart("0123456789abcdef01234567")
        with pytest.raises(UnknownUser):
            cart.remove_from_cart("0123456789abcdef01234567", 1)
        with pytest.raises(UnknownUser):
            cart.clear_cart("not-an-object-id")
