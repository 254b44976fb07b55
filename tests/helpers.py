SUPERADMIN_EMAIL = "root@hrmsworld.com"
SUPERADMIN_PASSWORD = "rootpass123"
ADMIN_PASSWORD = "secret123"


def login(client, email, password):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


def start_payload(**overrides):
    payload = {
        "companyName": "Acme",
        "adminFirstName": "Ada",
        "adminLastName": "Lovelace",
        "phone": "9876543210",
        "gender": "female",
        "email": "a@acme.com",
        "password": ADMIN_PASSWORD,
        "confirmPassword": ADMIN_PASSWORD,
        "acceptTerms": True,
    }
    payload.update(overrides)
    return payload


def register_company(
    client,
    plan_id,
    employee_count=10,
    employees=None,
    method="offline",
    **start_overrides
):
    """Run the whole wizard and return the payment response body"""
    response = client.post("/api/registration/start", json=start_payload(**start_overrides))
    assert response.status_code == 201, response.text
    session_id = response.json()["sessionId"]

    response = client.post(
        f"/api/registration/{session_id}/select-plan", json={"planId": plan_id}
    )
    assert response.status_code == 200, response.text

    response = client.post(
        f"/api/registration/{session_id}/add-employees",
        json={"employeeCount": employee_count, "employees": employees or []},
    )
    assert response.status_code == 200, response.text

    if method == "online":
        response = client.post(
            f"/api/registration/{session_id}/pay-online",
            json={
                "cardNumber": "4242424242424242",
                "expiryMonth": "12",
                "expiryYear": "2030",
                "cvv": "123",
            },
        )
    else:
        response = client.post(
            f"/api/registration/{session_id}/pay-offline",
            json={"notes": "wire transfer pending"},
        )
    assert response.status_code == 200, response.text
    return response.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
