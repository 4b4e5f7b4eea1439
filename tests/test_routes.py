# =============================================================================
# tests/test_routes.py - HTTP Surface Tests
# =============================================================================
# Exercises the HTML routes end to end with FastAPI's TestClient. Database and
# weather upstreams come from the fixtures in conftest.py.
# =============================================================================

from fastapi.testclient import TestClient

from core.config import settings

ALICE = {"username": "alice", "email": "a@x.com", "password": "secret1", "confirm_password": "secret1"}


def register(client, **overrides):
    return client.post("/register", data={**ALICE, **overrides}, follow_redirects=False)


def login(client, username="alice", password="secret1"):
    return client.post("/login", data={"username": username, "password": password}, follow_redirects=False)


# =============================================================================
# Auth pages
# =============================================================================

class TestRegistration:

    def test_register_form(self, client):
        response = client.get("/register")
        assert response.status_code == 200
        assert 'name="confirm_password"' in response.text

    def test_register_redirects_to_login(self, client):
        response = register(client)

        assert response.status_code == 303
        assert response.headers["location"] == "/login?registrationSuccess=true"

    def test_success_banner(self, client):
        response = client.get("/login", params={"registrationSuccess": "true"})
        assert "Registration successful! Please log in." in response.text

    def test_no_banner_by_default(self, client):
        assert "Registration successful!" not in client.get("/login").text

    def test_short_password_rerenders_form(self, client):
        response = register(client, password="12345", confirm_password="12345")

        assert response.status_code == 400
        assert "Password must be at least 6 characters long." in response.text

    def test_duplicate_rerenders_form(self, client):
        register(client)
        response = register(client, username="alice2")

        assert response.status_code == 409
        assert "Username or Email already exists." in response.text

    def test_missing_field(self, client):
        response = client.post("/register", data={"username": "alice"}, follow_redirects=False)

        assert response.status_code == 400
        assert "All fields are required." in response.text


class TestLoginFlow:

    def test_register_login_profile(self, client):
        register(client)
        response = login(client)

        assert response.status_code == 303
        assert response.headers["location"] == "/profile"
        assert settings.session_cookie_name in response.cookies

        profile = client.get("/profile")
        assert profile.status_code == 200
        assert "alice" in profile.text
        assert "a@x.com" in profile.text
        assert "No crops recorded yet." in profile.text

    def test_bad_credentials_same_message(self, client):
        register(client)

        wrong_password = login(client, password="nope-nope")
        unknown_user = login(client, username="mallory")

        assert wrong_password.status_code == unknown_user.status_code == 401
        assert "Invalid username or password." in wrong_password.text
        assert "Invalid username or password." in unknown_user.text

    def test_login_missing_fields(self, client):
        response = client.post("/login", data={"username": "alice"}, follow_redirects=False)

        assert response.status_code == 400
        assert "Username and password are required." in response.text

    def test_profile_requires_login(self, client):
        response = client.get("/profile")

        assert response.status_code == 200
        assert "You need to be logged in to view your profile." in response.text

    def test_logout(self, client):
        register(client)
        login(client)

        response = client.post("/logout", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/"

        assert "You need to be logged in" in client.get("/profile").text

    def test_revoked_token_is_not_accepted(self, client):
        register(client)
        token = login(client).cookies[settings.session_cookie_name]

        client.post("/logout")
        client.cookies.clear()
        client.cookies.set(settings.session_cookie_name, token)

        assert "You need to be logged in" in client.get("/profile").text

    def test_logout_when_anonymous(self, client):
        response = client.post("/logout", follow_redirects=False)
        assert response.status_code == 303

    def test_two_clients_keep_separate_sessions(self, app, client):
        register(client)
        register(client, username="bob", email="b@x.com")

        other = TestClient(app)
        login(client, "alice")
        login(other, "bob")

        assert "a@x.com" in client.get("/profile").text
        assert "b@x.com" in other.get("/profile").text
        assert "b@x.com" not in client.get("/profile").text


# =============================================================================
# Weather pages
# =============================================================================

class TestWeatherPages:

    def test_home_is_empty(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "Humidity" not in response.text

    def test_home_snapshot(self, client):
        response = client.post("/submit-pincode-home", data={"pincode": "560001"})

        assert response.status_code == 200
        assert "Bengaluru, Karnataka, India" in response.text
        assert "Partly cloudy" in response.text
        assert "Humidity: N/A" in response.text
        assert 'value="560001"' in response.text

    def test_home_blank_pincode(self, client):
        response = client.post("/submit-pincode-home", data={"pincode": ""})
        assert "Please enter a pincode." in response.text

    def test_home_unknown_pincode(self, client, upstream):
        upstream.geocode_results = []

        response = client.post("/submit-pincode-home", data={"pincode": "00000"})

        assert "No coordinates found for this pincode." in response.text
        assert 'value="00000"' in response.text
        assert upstream.forecast_requests == []

    def test_home_transport_error_hides_details(self, client, upstream):
        upstream.forecast_status = 500

        response = client.post("/submit-pincode-home", data={"pincode": "560001"})

        assert "Error fetching weather data. Please try again." in response.text
        assert "500" not in response.text

    def test_forecast_page(self, client):
        response = client.get("/weather-forecast")
        assert response.status_code == 200
        assert "<table>" not in response.text

    def test_full_forecast(self, client):
        response = client.post("/get-coordinates", data={"pincode": "560001"})

        assert response.status_code == 200
        assert "Bengaluru, Karnataka, India" in response.text
        assert "2024-06-03" in response.text
        assert "Thunderstorm" in response.text

    def test_full_forecast_blank_pincode(self, client):
        response = client.post("/get-coordinates", data={"pincode": " "})
        assert "Please enter a pincode." in response.text


class TestStaticPages:

    def test_crop_recommender(self, client):
        response = client.get("/crop-recommender")
        assert response.status_code == 200
        assert "Crop Recommender" in response.text

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_nav_shows_username_when_logged_in(self, client):
        register(client)
        login(client)
        assert "alice" in client.get("/crop-recommender").text
