import uuid

from app.models.submission import AssessmentInvitation
from app.services.mail import render_template

ASSESSMENT_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")


def invite_payload(candidates, **overrides):
    payload = {
        "candidates": candidates,
        "assessment_id": str(ASSESSMENT_ID),
        "assessment_title": "Backend Screening",
        "subject": "Your assessment",
        "body": "Hello there,\nplease take the test.",
    }
    payload.update(overrides)
    return payload


def candidate(name, email):
    return {"id": str(uuid.uuid4()), "name": name, "email": email}


# -------------------------
# Template rendering
# -------------------------

def test_render_replaces_raw_and_escaped_placeholders():
    html = render_template(
        "<p><<Candidate Name>></p><p>&lt;&lt;Candidate Name&gt;&gt;</p>",
        {"Candidate Name": "Jane"},
    )
    assert html == "<p>Jane</p><p>Jane</p>"


def test_render_escapes_values_and_does_not_expand_them_again():
    html = render_template(
        "<p>Hi <<Candidate Name>></p><a href=\"<<Assessment Link>>\">go</a><div><<EMAIL_BODY>></div>",
        {
            "Candidate Name": "<b>Eve</b> <<Assessment Link>>",
            "Assessment Link": "https://x.test/a?candidateId=1&collegeId=2",
            "EMAIL_BODY": "Line one<br />Line two",
        },
    )
    assert "<p>Hi &lt;b&gt;Eve&lt;/b&gt; &lt;&lt;Assessment Link&gt;&gt;</p>" in html
    assert 'href="https://x.test/a?candidateId=1&amp;collegeId=2"' in html
    assert "<div>Line one<br />Line two</div>" in html


def test_render_conditional_blocks():
    template = "A<!-- IF passcode -->code: <<Passcode>><!-- ENDIF passcode -->B"

    kept = render_template(template, {"Passcode": "xyz"}, keep_blocks=["passcode"])
    dropped = render_template(template, {"Passcode": "N/A"}, drop_blocks=["passcode"])

    assert kept == "Acode: xyzB"
    assert dropped == "AB"


# -------------------------
# Invitations
# -------------------------

def test_invitations_all_sent(client, db, outbox):
    college_id = uuid.uuid4()
    response = client.post(
        "/api/v1/send-assessment",
        json=invite_payload(
            [candidate("Jane", "jane@x.com"), candidate("Ravi", "ravi@y.com")],
            passcode="s3cret",
            college_id=str(college_id),
        ),
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Assessment invitations sent to 2 candidates successfully."

    first = outbox.sent[0]
    assert first["headers"]["authorization"] == "Zoho-enczapikey test-token"
    html = first["payload"]["htmlbody"]
    assert "s3cret" in html
    assert "Hello there,<br />please take the test." in html
    assert f"/assessment/{ASSESSMENT_ID}?candidateId=" in html
    assert f"&amp;collegeId={college_id}" in html

    invitations = db.query(AssessmentInvitation).all()
    assert len(invitations) == 2
    assert {i.college_id for i in invitations} == {college_id}


def test_passcode_block_dropped_without_passcode(client, outbox):
    client.post("/api/v1/send-assessment", json=invite_payload([candidate("Jane", "jane@x.com")]))
    html = outbox.sent[0]["payload"]["htmlbody"]
    assert "passcode" not in html.lower()


def test_verification_notice_prepended(client, outbox):
    client.post(
        "/api/v1/send-assessment",
        json=invite_payload([candidate("Jane", "jane@x.com")], authentication="email_verification"),
    )
    assert "verify your name and email address" in outbox.sent[0]["payload"]["htmlbody"]


def test_partial_failure_is_multi_status(client, db, outbox):
    outbox.reject.add("bad@x.com")
    response = client.post(
        "/api/v1/send-assessment",
        json=invite_payload([candidate("Good", "good@x.com"), candidate("Bad", "bad@x.com")]),
    )

    assert response.status_code == 207
    body = response.json()
    assert body["success"] is False
    assert "Sent: 1, Failed: 1" in body["message"]
    assert "bad@x.com" in body["message"]
    assert db.query(AssessmentInvitation).count() == 1


def test_total_failure_is_server_error(client, outbox):
    outbox.reject.update({"a@x.com", "b@x.com"})
    response = client.post(
        "/api/v1/send-assessment",
        json=invite_payload([candidate("A", "a@x.com"), candidate("B", "b@x.com")]),
    )
    assert response.status_code == 500
    assert response.json()["failed"] == 2


def test_empty_candidate_list_rejected(client):
    assert client.post("/api/v1/send-assessment", json=invite_payload([])).status_code == 422


# -------------------------
# Application status emails
# -------------------------

def test_rejection_email(client, outbox):
    response = client.post(
        "/api/v1/rejected",
        json={"full_name": "Jane Doe", "email": "jane@x.com", "position": "Backend Engineer"},
    )
    assert response.status_code == 200

    sent = outbox.sent[0]["payload"]
    assert sent["subject"] == "Update on your application with Megamind"
    assert "Jane Doe" in sent["htmlbody"]
    assert "Backend Engineer" in sent["htmlbody"]


def test_shortlist_email_failure_maps_to_500(client, outbox):
    outbox.reject.add("jane@x.com")
    response = client.post(
        "/api/v1/shortlisted",
        json={"full_name": "Jane Doe", "email": "jane@x.com", "position": "Backend Engineer"},
    )
    assert response.status_code == 500
    assert response.json()["success"] is False
