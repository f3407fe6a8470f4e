"""
Component tests for signup and login
"""
import jwt
from fastapi.testclient import TestClient

from auth import TOKEN_SECRET


class TestSignup:
    def test_signup_returns_token_for_new_user(self, test_client: TestClient, mongo_db):
        response = test_client.post(
            "/signup", json={"username": "alice", "email": "a@x.com", "password": "p"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        user = mongo_db["user"].find_one({"email": "a@x.com"})
        payload = jwt.decode(data["token"], TOKEN_SECRET, algorithms=["HS256"])
        assert payload == {"user": {"id": str(user["_id"])}}

    def test_new_user_cart_has_200_zero_slots(self, test_client: TestClient, mongo_db):
        test_client.post("/signup", json={"username": "alice", "email": "a@x.com", "password": "p"})

        cart = mongo_db["user"].find_one({"email": "a@x.com"})["cartData"]

        assert len(cart) == 200
        assert set(cart) == {str(i) for i in range(200)}
        assert all(qty == 0 for qty in cart.values())

    def test_duplicate_email_rejected(self, test_client: TestClient, mongo_db):
        body = {"username": "alice", "email": "a@x.com", "password": "p"}
        test_client.post("/signup", json=body)

        response = test_client.post("/signup", json={**body, "username": "other"})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Email already exists with different account",
        }
        assert mongo_db["user"].count_documents({"email": "a@x.com"}) == 1

    def test_email_match_is_case_sensitive(self, test_client: TestClient, mongo_db):
        test_client.post("/signup", json={"username": "a", "email": "a@x.com", "password": "p"})

        response = test_client.post("/signup", json={"username": "b", "email": "A@x.com", "password": "p"})

        assert response.json()["success"] is True
        assert mongo_db["user"].count_documents({}) == 2


class TestLogin:
    def test_login_with_correct_password(self, test_client: TestClient, signup_token):
        signup_token(email="a@x.com", password="p")

        response = test_client.post("/login", json={"email": "a@x.com", "password": "p"})

        data = response.json()
        assert data["success"] is True
        assert jwt.decode(data["token"], TOKEN_SECRET, algorithms=["HS256"])["user"]["id"]

    def test_wrong_password(self, test_client: TestClient, signup_token):
        signup_token(email="a@x.com", password="p")

        response = test_client.post("/login", json={"email": "a@x.com", "password": "nope"})

        assert response.status_code == 200
        assert response.json() == {"success": False, "errors": "Password is incorrect"}

    def test_unknown_email(self, test_client: TestClient):
        response = test_client.post("/login", json={"email": "ghost@x.com", "password": "p"})

        assert response.json() == {"success": False, "errors": "Email Id doesn't exist"}

    def test_login_merges_client_cart(self, test_client: TestClient, signup_token, mongo_db):
        """Client keys overwrite stored ones, other stored keys are kept"""
        token = signup_token(email="a@x.com", password="p")
        test_client.post("/addtocart", json={"itemId": "7"}, headers={"auth-token": token})

        response = test_client.post(
            "/login",
            json={"email": "a@x.com", "password": "p", "cartData": {"3": 4, "500": 1}},
        )

        assert response.json()["success"] is True
        cart = mongo_db["user"].find_one({"email": "a@x.com"})["cartData"]
        assert cart["3"] == 4
        assert cart["500"] == 1
        assert cart["7"] == 1
        assert cart["0"] == 0

    def test_failed_login_does_not_merge_cart(self, test_client: TestClient, signup_token, mongo_db):
        signup_token(email="a@x.com", password="p")

        test_client.post("/login", json={"email": "a@x.com", "password": "bad", "cartData": {"3": 4}})

        assert mongo_db["user"].find_one({"email": "a@x.com"})["cartData"]["3"] == 0
