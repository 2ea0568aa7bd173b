"""Archive API — multipart upload, listing, download and batch delete."""

import base64


async def _student(client, headers):
    res = await client.post("/api/v1/students", headers=headers, json={
        "name": "Mia", "phone": "555",
    })
    return res.json()["id"]


async def _upload(client, headers, sid, files):
    return await client.post(
        f"/api/v1/students/{sid}/archive", headers=headers, files=files,
    )


async def test_upload_list_and_download(client, auth_headers):
    sid = await _student(client, auth_headers)
    res = await _upload(client, auth_headers, sid, [
        ("files", ("sketch.png", b"\x89PNG-one", "image/png")),
        ("files", ("paint.jpg", b"\xff\xd8-two", "image/jpeg")),
    ])
    assert res.status_code == 201
    images = res.json()
    assert sorted(i["name"] for i in images) == ["paint.jpg", "sketch.png"]
    png = next(i for i in images if i["name"] == "sketch.png")
    assert png["url"] == "data:image/png;base64," + base64.b64encode(b"\x89PNG-one").decode()
    assert png["download_name"] == "sketch.png"

    res = await client.get(f"/api/v1/students/{sid}/archive", headers=auth_headers)
    assert len(res.json()) == 2

    res = await client.get(f"/api/v1/archive/{png['id']}/download", headers=auth_headers)
    assert res.status_code == 200
    assert res.content == b"\x89PNG-one"
    assert res.headers["content-type"] == "image/png"
    assert "sketch.png" in res.headers["content-disposition"]

    res = await client.get(f"/api/v1/students/{sid}", headers=auth_headers)
    assert res.json()["student"]["archive_count"] == 2


async def test_non_image_rejects_whole_batch(client, auth_headers):
    sid = await _student(client, auth_headers)
    res = await _upload(client, auth_headers, sid, [
        ("files", ("ok.png", b"png", "image/png")),
        ("files", ("notes.txt", b"text", "text/plain")),
    ])
    assert res.status_code == 400
    res = await client.get(f"/api/v1/students/{sid}/archive", headers=auth_headers)
    assert res.json() == []


async def test_upload_for_unknown_student_is_404(client, auth_headers):
    res = await _upload(client, auth_headers, "missing00", [
        ("files", ("ok.png", b"png", "image/png")),
    ])
    assert res.status_code == 404


async def test_batch_delete_requires_confirm(client, auth_headers):
    sid = await _student(client, auth_headers)
    images = (await _upload(client, auth_headers, sid, [
        ("files", ("a.png", b"a", "image/png")),
        ("files", ("b.png", b"b", "image/png")),
    ])).json()
    ids = [i["id"] for i in images]

    res = await client.post("/api/v1/archive/delete", headers=auth_headers, json={"ids": ids})
    assert res.status_code == 409

    res = await client.post("/api/v1/archive/delete", headers=auth_headers, json={
        "ids": [ids[0], "missing00"], "confirm": True,
    })
    assert res.json() == {"deleted": 1}
    res = await client.get(f"/api/v1/students/{sid}/archive", headers=auth_headers)
    assert [i["id"] for i in res.json()] == [ids[1]]


async def test_download_unknown_image_is_404(client, auth_headers):
    res = await client.get("/api/v1/archive/missing00/download", headers=auth_headers)
    assert res.status_code == 404


async def test_deleting_student_removes_images(client, auth_headers):
    sid = await _student(client, auth_headers)
    image = (await _upload(client, auth_headers, sid, [
        ("files", ("a.png", b"a", "image/png")),
    ])).json()[0]
    await client.delete(
        f"/api/v1/students/{sid}", params={"confirm": "true"}, headers=auth_headers,
    )
    res = await client.get(f"/api/v1/archive/{image['id']}/download", headers=auth_headers)
    assert res.status_code == 404
