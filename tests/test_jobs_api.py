def _signup(client, *, email: str, password: str = "Testpass123!", role: str, name: str = "Test User"):
    return client.post(
        "/auth/signup",
        json={"email": email, "password": password, "role": role, "name": name},
    )


def _auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _recruiter_token(client, email: str = "rec_jobs@example.com") -> str:
    return _signup(client, email=email, role="recruiter", name="Recruiter").json()["access_token"]


def _post_job(client, token: str, **fields) -> dict:
    body = {"title": "Backend Engineer", "description": "Build APIs", "location": "Remote", "company_name": "Acme"}
    body.update(fields)
    r = client.post("/jobs", json=body, headers=_auth_headers(token))
    assert r.status_code == 201, r.text
    return r.json()["job"]


def test_browse_lists_only_open_jobs_with_filters(client):
    token = _recruiter_token(client)
    _post_job(client, token, title="Backend Engineer", location="Berlin", company_name="Globex")
    _post_job(client, token, title="Designer", location="Paris", company_name="Acme")
    _post_job(client, token, title="Old role", status="Closed")

    r = client.get("/jobs")
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["total"] == 2
    assert {j["title"] for j in data["jobs"]} == {"Backend Engineer", "Designer"}
    assert data["locations"] == ["Berlin", "Paris"]
    assert data["companies"] == ["Acme", "Globex"]

    r = client.get("/jobs", params={"q": "globex"})
    assert [j["title"] for j in r.json()["jobs"]] == ["Backend Engineer"]

    r = client.get("/jobs", params={"location": "Paris", "company": "All"})
    assert [j["title"] for j in r.json()["jobs"]] == ["Designer"]


def test_browse_sorts_by_salary_and_paginates(client):
    token = _recruiter_token(client)
    _post_job(client, token, title="Mid", salary_range="$50,000 - $70,000")
    _post_job(client, token, title="Top", salary_range="$90k")
    _post_job(client, token, title="Unknown")

    r = client.get("/jobs", params={"sort": "HighestSalary"})
    assert [j["title"] for j in r.json()["jobs"]] == ["Top", "Mid", "Unknown"]

    for i in range(8):
        _post_job(client, token, title=f"Extra {i}")
    first = client.get("/jobs", params={"page": 1}).json()
    last = client.get("/jobs", params={"page": 99}).json()
    assert first["page_size"] == 9
    assert first["total_pages"] == 2
    assert len(first["jobs"]) == 9
    assert last["page"] == 2
    assert len(last["jobs"]) == 2


def test_closed_job_is_hidden_from_the_public(client):
    token = _recruiter_token(client)
    job = _post_job(client, token)

    r = client.post(f"/jobs/{job['id']}/close", headers=_auth_headers(token))
    assert r.status_code == 200, r.text
    assert r.json()["job"]["status"] == "Closed"

    assert client.get(f"/jobs/{job['id']}").status_code == 404
    assert client.get(f"/jobs/{job['id']}", headers=_auth_headers(token)).status_code == 200
    assert client.get("/jobs/missing").status_code == 404


def test_only_owner_manages_a_job(client):
    owner = _recruiter_token(client, "owner@example.com")
    other = _recruiter_token(client, "other@example.com")
    job = _post_job(client, owner)

    r = client.patch(f"/jobs/{job['id']}", json={"title": "Hijacked"}, headers=_auth_headers(other))
    assert r.status_code == 403, r.text
    assert r.json()["code"] == "forbidden"

    r = client.patch(f"/jobs/{job['id']}", json={"salary_range": "$100k"}, headers=_auth_headers(owner))
    assert r.status_code == 200, r.text
    assert r.json()["job"]["salary_range"] == "$100k"
    assert r.json()["job"]["title"] == "Backend Engineer"

    assert client.delete(f"/jobs/{job['id']}", headers=_auth_headers(other)).status_code == 403
    assert client.delete(f"/jobs/{job['id']}", headers=_auth_headers(owner)).status_code == 200
    assert client.get(f"/jobs/{job['id']}").status_code == 404


def test_recruiter_dashboard(client):
    token = _recruiter_token(client)
    _post_job(client, token, title="One")
    _post_job(client, token, title="Two", status="Closed")

    mine = client.get("/jobs/mine", headers=_auth_headers(token))
    assert mine.status_code == 200, mine.text
    assert {j["title"] for j in mine.json()["jobs"]} == {"One", "Two"}

    overview = client.get("/jobs/overview", headers=_auth_headers(token)).json()["overview"]
    assert overview == {"total_jobs": 2, "open_jobs": 1, "total_applicants": 0, "interviews": 0, "hired": 0}


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "Backend running"


def test_framework_errors_carry_a_code(client):
    r = client.get("/no-such-route")
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Not Found", "code": "not_found"}

    r = client.post("/health")
    assert r.status_code == 405
    assert r.json()["code"] == "method_not_allowed"
    assert "GET" in r.headers["allow"]
