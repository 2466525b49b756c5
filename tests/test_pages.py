from conftest import FAKE_JPEG, make_pdf


def test_landing_lists_both_collections(client):
    response = client.get("/")
    assert response.status_code == 200
    assert 'href="/magazines"' in response.text
    assert 'href="/ewc"' in response.text


def test_catalog_grid_shows_cards(client, create_item):
    covered = create_item(title="With cover", thumbnail=FAKE_JPEG, authors=["Kim", "Lee"])
    plain = create_item(title="Without cover")

    response = client.get("/magazines")
    assert response.status_code == 200
    html = response.text
    assert "With cover" in html and "Without cover" in html
    assert "Kim, Lee" in html
    assert f'src="/uploads/{covered["id"]}.jpg"' in html
    # Falls back to a live render of page 1.
    assert f'src="/api/magazines/{plain["id"]}/pages/1?height=375"' in html
    assert f'href="/magazines/{plain["id"]}/read"' in html
    assert html.index("Without cover") < html.index("With cover")


def test_empty_catalog(client):
    response = client.get("/ewc")
    assert response.status_code == 200
    assert "Nothing published yet." in response.text


def test_unknown_collection(client):
    assert client.get("/comics").status_code == 422


def test_reader_page_spread(client, create_item):
    item = create_item(pdf=make_pdf(12))
    response = client.get(f"/magazines/{item['id']}/read", params={"vw": 1920, "vh": 1080})
    assert response.status_code == 200
    html = response.text
    assert 'alt="Page 1"' in html
    assert "width: 700px" in html
    # Pages 2..5 are in the window but off screen; page 6 is not.
    assert f"/api/magazines/{item['id']}/pages/5?height=938" in html
    assert f"/api/magazines/{item['id']}/pages/6?" not in html
    assert "?page=2&amp;vw=1920&amp;vh=1080" in html or "?page=2&vw=1920&vh=1080" in html


def test_reader_page_single(client, create_item):
    item = create_item(pdf=make_pdf(3))
    response = client.get(
        f"/magazines/{item['id']}/read", params={"page": 2, "vw": 375, "vh": 667}
    )
    assert response.status_code == 200
    assert 'alt="Page 2"' in response.text
    assert "Swipe to flip pages" in response.text


def test_reader_page_unknown_item(client):
    assert client.get("/magazines/missing/read").status_code == 404


def test_reader_page_unreadable_pdf(client, create_item):
    item = create_item(pdf=b"this is not a pdf")
    response = client.get(f"/magazines/{item['id']}/read", params={"vw": 800, "vh": 600})
    assert response.status_code == 200
    assert "could not be loaded" in response.text


def test_reader_page_keeps_swipe_navigation_in_spread_mode(client, create_item):
    item = create_item(pdf=make_pdf(6))
    html = client.get(
        f"/magazines/{item['id']}/read", params={"vw": 1024, "vh": 768}
    ).text
    assert "touchend" in html
    assert "Math.abs(dx) < 30" in html


def test_reader_page_reports_a_broken_data_file(client, settings):
    settings.data_file.parent.mkdir(parents=True, exist_ok=True)
    settings.data_file.write_text("{not json", encoding="utf-8")
    response = client.get("/magazines/abc/read")
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to load item"}


def test_admin_panel_lists_items_and_wires_the_api(client, create_item):
    covered = create_item(title="Spring issue", thumbnail=FAKE_JPEG, authors=["Kim"])
    plain = create_item(title="Summer issue")
    create_item("ewc", title="Essay entry")

    response = client.get("/admin")
    assert response.status_code == 200
    html = response.text
    assert "Spring issue" in html and "Summer issue" in html
    assert "Essay entry" not in html
    assert html.index("Summer issue") < html.index("Spring issue")
    assert f'data-id="{covered["id"]}"' in html
    assert f'data-id="{plain["id"]}"' in html
    # Only the item without a cover offers to generate one.
    assert html.count('data-action="generate"') == 1
    assert html.count('data-action="delete"') == 2

    assert "/api/auth/verify" in html
    assert 'var apiBase = "/api/magazines"' in html
    assert 'var header = "x-admin-password"' in html
    assert "/thumbnail/generate" in html
    assert "/thumbnails/backfill" in html
    for field in ('name="title"', 'name="publishDate"', 'name="authors"', 'name="pdf"', 'name="thumbnail"'):
        assert field in html


def test_admin_panel_switches_collection(client, create_item):
    create_item("ewc", title="Essay entry")
    html = client.get("/admin", params={"collection": "ewc"}).text
    assert "Essay entry" in html
    assert 'var apiBase = "/api/ewc"' in html
    assert client.get("/admin", params={"collection": "comics"}).status_code == 422


def test_admin_panel_empty_collection(client):
    response = client.get("/admin")
    assert response.status_code == 200
    assert "No issues found." in response.text
