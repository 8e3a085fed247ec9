"""
Scénarios de bout en bout via l'API HTTP, sur une vraie base SQLite en mémoire.
Les emails sont interceptés par la fixture `mailer`.
"""

from datetime import datetime, timedelta

import pytest

from app.models.account import Account

from conftest import auth_headers, create_account


def register_body(username: str, email: str = None) -> dict:
    return {
        "username": username,
        "password": "motdepasse1",
        "display_name": username.upper(),
        "email": email or f"{username}@example.com",
    }


def login(api, username: str, password: str = "secret123"):
    return api.post("/api/v1/accounts/login", json={"username": username, "password": password})


# ============================================================
# Inscription, vérification d'email, connexion
# ============================================================

def test_parcours_inscription_tuteur(api, mailer):
    # 1. Inscription : compte en attente de vérification, email envoyé
    response = api.post("/api/v1/accounts/register-tutor", json=register_body("t1"))
    assert response.status_code == 201
    assert response.json()["state"] == "PENDING_VERIFICATION"
    assert response.json()["is_tutor"] is True
    mailer.verification.assert_called_once()
    to_email, username, raw_token = mailer.verification.call_args.args
    assert (to_email, username) == ("t1@example.com", "t1")

    # 2. Même adresse email pour un autre compte : refusé
    response = api.post("/api/v1/accounts/register-tutor", json=register_body("t2", "t1@example.com"))
    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_TAKEN"

    # 3. Connexion avant vérification : refusée
    response = api.post("/api/v1/accounts/login", json={"username": "t1", "password": "motdepasse1"})
    assert response.status_code == 401
    assert response.json()["code"] == "ACCOUNT_NOT_ACTIVE"

    # 4. Vérification avec le jeton reçu par email
    response = api.get("/api/v1/accounts/verify-email", params={"username": "t1", "token": raw_token})
    assert response.status_code == 200

    # 5. Connexion puis création d'un cours
    response = api.post("/api/v1/accounts/login", json={"username": "t1", "password": "motdepasse1"})
    assert response.status_code == 200
    headers = {"Authorization": f"Bearer {response.json()['token']}"}

    response = api.post("/api/v1/courses", json={"tutor_username": "t1", "name": "Maths"}, headers=headers)
    assert response.status_code == 201

    # 6. Pas de création au nom d'un autre tuteur
    response = api.post("/api/v1/courses", json={"tutor_username": "t2", "name": "Maths"}, headers=headers)
    assert response.status_code == 403


def test_inscription_nom_deja_pris(api):
    api.post("/api/v1/accounts/register-tutor", json=register_body("t1"))
    response = api.post("/api/v1/accounts/register-tutor", json=register_body("t1", "autre@example.com"))
    assert response.status_code == 409
    assert response.json()["code"] == "USERNAME_TAKEN"


def test_inscription_email_invalide(api):
    response = api.post("/api/v1/accounts/register-tutor", json=register_body("t1", "pas-un-email"))
    assert response.status_code == 422


def test_verification_jeton_invalide(api, mailer):
    api.post("/api/v1/accounts/register-tutor", json=register_body("t1"))
    response = api.get("/api/v1/accounts/verify-email", params={"username": "t1", "token": "faux"})
    assert response.status_code == 400
    assert response.json()["code"] == "TOKEN_INVALID"


def test_verification_deux_fois(api, mailer):
    api.post("/api/v1/accounts/register-tutor", json=register_body("t1"))
    raw_token = mailer.verification.call_args.args[2]
    assert api.get("/api/v1/accounts/verify-email", params={"username": "t1", "token": raw_token}).status_code == 200
    response = api.get("/api/v1/accounts/verify-email", params={"username": "t1", "token": raw_token})
    assert response.status_code == 200
    assert "déjà" in response.json()["detail"]


def test_inscription_eleve_par_tuteur(api, db, mailer):
    create_account(db, "t1", is_tutor=True)
    response = api.post(
        "/api/v1/accounts/register-student", json=register_body("s1"), headers=auth_headers("t1")
    )
    assert response.status_code == 201
    assert response.json()["is_tutor"] is False
    mailer.verification.assert_called_once()


def test_inscription_eleve_par_eleve_refusee(api, db):
    create_account(db, "s1")
    response = api.post(
        "/api/v1/accounts/register-student", json=register_body("s2"), headers=auth_headers("s1")
    )
    assert response.status_code == 403
    assert response.json()["code"] == "NOT_A_TUTOR"


def test_login_mauvais_mot_de_passe(api, db):
    create_account(db, "t1", is_tutor=True)
    response = login(api, "t1", "mauvais")
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_login_compte_inconnu_meme_reponse(api):
    response = login(api, "fantome")
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


# ============================================================
# Jetons
# ============================================================

def test_requete_sans_jeton(api):
    response = api.get("/api/v1/courses")
    assert response.status_code == 401
    assert response.json()["code"] == "MISSING_TOKEN"


def test_requete_jeton_invalide(api):
    response = api.get("/api/v1/courses", headers={"Authorization": "Bearer pas-un-jwt"})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"


def test_jeton_compte_supprime(api):
    response = api.get("/api/v1/courses", headers=auth_headers("fantome"))
    assert response.status_code == 401
    assert response.json()["code"] == "UNKNOWN_ACCOUNT"


def test_debug_auth_sans_base(api):
    """Le diagnostic ne vérifie que la signature du jeton."""
    response = api.get("/api/v1/debug/auth", headers=auth_headers("fantome"))
    assert response.status_code == 200
    assert response.json() == {"authenticated": True, "username": "fantome"}


def test_jeton_compte_non_verifie(api, db):
    create_account(db, "t1", is_tutor=True, active=False)
    response = api.get("/api/v1/courses", headers=auth_headers("t1"))
    assert response.status_code == 401
    assert response.json()["code"] == "ACCOUNT_NOT_ACTIVE"


# ============================================================
# Désactivation et réactivation
# ============================================================

def test_parcours_desactivation_reactivation(api, db, mailer):
    create_account(db, "t1", is_tutor=True)
    create_account(db, "s1")

    # Le tuteur désactive l'élève : avertissement envoyé
    response = api.post("/api/v1/accounts/deactivate/s1", headers=auth_headers("t1"))
    assert response.status_code == 200
    mailer.warning.assert_called_once_with("s1@example.com")

    # Le jeton de l'élève est refusé tant qu'il ne s'est pas reconnecté
    response = api.get("/api/v1/courses", headers=auth_headers("s1"))
    assert response.status_code == 401
    assert response.json()["code"] == "ACCOUNT_DEACTIVATED"

    # Connexion : le compte est réactivé
    response = login(api, "s1")
    assert response.status_code == 200
    headers = {"Authorization": f"Bearer {response.json()['token']}"}
    assert api.get("/api/v1/courses", headers=headers).status_code == 200

    history = api.get("/api/v1/accounts/me/history", headers=headers).json()
    assert [h["event_type"] for h in history] == ["DEACTIVATION", "ACTIVATION"]

    response = api.get("/api/v1/accounts/s1", headers=headers)
    assert response.json()["state"] == "ACTIVE"


def test_desactivation_autre_tuteur_refusee(api, db, mailer):
    create_account(db, "t1", is_tutor=True)
    create_account(db, "t2", is_tutor=True)
    response = api.post("/api/v1/accounts/deactivate/t2", headers=auth_headers("t1"))
    assert response.status_code == 403
    assert response.json()["code"] == "CANNOT_DEACTIVATE_TUTOR"
    mailer.warning.assert_not_called()


def test_desactivation_de_soi_sans_email(api, db, mailer):
    create_account(db, "t1", is_tutor=True)
    response = api.post("/api/v1/accounts/deactivate/t1", headers=auth_headers("t1"))
    assert response.status_code == 200
    mailer.warning.assert_not_called()

    # Le tuteur désactivé ne peut plus appeler l'API sans se reconnecter
    response = api.get("/api/v1/courses", headers=auth_headers("t1"))
    assert response.json()["code"] == "ACCOUNT_DEACTIVATED"


def test_desactivation_par_eleve_refusee(api, db):
    create_account(db, "s1")
    create_account(db, "s2")
    response = api.post("/api/v1/accounts/deactivate/s2", headers=auth_headers("s1"))
    assert response.status_code == 403


def test_desactivation_compte_inconnu(api, db):
    create_account(db, "t1", is_tutor=True)
    response = api.post("/api/v1/accounts/deactivate/fantome", headers=auth_headers("t1"))
    assert response.status_code == 404


# ============================================================
# Consultation des comptes
# ============================================================

def test_list_accounts_selon_le_role(api, db):
    create_account(db, "t1", is_tutor=True)
    create_account(db, "s1")
    create_account(db, "s2")

    tutor_view = api.get("/api/v1/accounts", headers=auth_headers("t1")).json()
    assert [a["username"] for a in tutor_view] == ["s1", "s2", "t1"]

    student_view = api.get("/api/v1/accounts", headers=auth_headers("s1")).json()
    assert [a["username"] for a in student_view] == ["s1"]


def test_settings_sans_secrets(api, db):
    create_account(db, "s1")
    body = api.get("/api/v1/accounts/me/settings", headers=auth_headers("s1")).json()
    assert body["account_username"] == "s1"
    assert "password_hash" not in body
    assert "activation_token" not in body


def test_settings_d_un_autre_eleve_refuse(api, db):
    create_account(db, "s1")
    create_account(db, "s2")
    response = api.get("/api/v1/accounts/s2/settings", headers=auth_headers("s1"))
    assert response.status_code == 403


def test_changer_photo_de_profil(api, db):
    create_account(db, "s1")
    response = api.put(
        "/api/v1/accounts/me/profile-picture",
        files={"file": ("moi.png", b"\x89PNG", "image/png")},
        headers=auth_headers("s1"),
    )
    assert response.status_code == 200
    assert response.json()["profile_picture_file_name"].endswith("_moi.png")


# ============================================================
# Séances, devoirs et notifications
# ============================================================

@pytest.fixture
def classroom(api, db):
    """t1 avec un cours où s1 est inscrit ; t2 et s2 servent d'étrangers."""
    for username, is_tutor in (("t1", True), ("t2", True), ("s1", False), ("s2", False)):
        create_account(db, username, is_tutor=is_tutor)
    course = api.post(
        "/api/v1/courses", json={"tutor_username": "t1", "name": "Maths"}, headers=auth_headers("t1")
    ).json()
    api.post(
        "/api/v1/enrollments",
        json={
            "student_username": "s1",
            "course_id": course["id"],
            "frequency": "hebdomadaire",
            "end_date": (datetime.now() + timedelta(days=60)).isoformat(),
        },
        headers=auth_headers("t1"),
    )
    return course


def plan_session(api, course_id: int, days: int = 3):
    return api.post(
        "/api/v1/sessions",
        json={
            "student_username": "s1",
            "course_id": course_id,
            "session_date_time": (datetime.now() + timedelta(days=days)).isoformat(),
        },
        headers=auth_headers("t1"),
    )


def test_parcours_seance_et_devoir(api, classroom):
    response = plan_session(api, classroom["id"])
    assert response.status_code == 201
    session = response.json()
    assert session["confirmation_status"] == "UNKNOWN"

    notifications = api.get("/api/v1/notifications", headers=auth_headers("s1")).json()
    assert [n["notification_type"] for n in notifications] == ["SESSION_CREATED"]

    # L'élève accepte : le tuteur est notifié
    response = api.post(f"/api/v1/sessions/{session['id']}/accept", headers=auth_headers("s1"))
    assert response.json()["confirmation_status"] == "YES"
    tutor_notifications = api.get("/api/v1/notifications", headers=auth_headers("t1")).json()
    assert [n["notification_type"] for n in tutor_notifications] == ["SESSION_ACCEPTED"]

    # Le tuteur déplace la séance : le statut repart à UNKNOWN
    response = api.put(
        f"/api/v1/sessions/{session['id']}",
        json={"session_date_time": (datetime.now() + timedelta(days=10)).isoformat()},
        headers=auth_headers("t1"),
    )
    assert response.status_code == 200
    assert response.json()["confirmation_status"] == "UNKNOWN"

    # Devoir puis solution déposée une seule fois
    homework = api.post(
        "/api/v1/homework",
        json={"session_id": session["id"], "name": "Fractions"},
        headers=auth_headers("t1"),
    ).json()
    response = api.post(
        f"/api/v1/homework/{homework['id']}/solution",
        files={"file": ("solution.pdf", b"%PDF-1.4", "application/pdf")},
        headers=auth_headers("s1"),
    )
    assert response.status_code == 200
    assert response.json()["has_solution_file"] is True

    response = api.post(
        f"/api/v1/homework/{homework['id']}/solution",
        files={"file": ("v2.pdf", b"autre", "application/pdf")},
        headers=auth_headers("s1"),
    )
    assert response.status_code == 400
    assert response.json()["code"] == "SOLUTION_EXISTS"

    response = api.get(f"/api/v1/homework/{homework['id']}/solution", headers=auth_headers("t1"))
    assert response.status_code == 200
    assert response.content == b"%PDF-1.4"

    # Le détail de la séance liste le devoir
    detail = api.get(f"/api/v1/sessions/{session['id']}", headers=auth_headers("s1")).json()
    assert [h["name"] for h in detail["homework_assignments"]] == ["Fractions"]


def test_seance_dans_le_passe(api, classroom):
    response = plan_session(api, classroom["id"], days=-1)
    assert response.status_code == 400
    assert response.json()["code"] == "DATE_IN_PAST"


def test_seance_introuvable(api, classroom):
    response = api.get("/api/v1/sessions/999", headers=auth_headers("t1"))
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_message_avec_piece_jointe(api, classroom):
    response = api.post(
        "/api/v1/messages",
        data={"recipient_username": "t1", "topic": "Question", "body": "Voir pièce jointe"},
        files={"file": ("exercice.txt", b"2+2", "text/plain")},
        headers=auth_headers("s1"),
    )
    assert response.status_code == 201
    message_id = response.json()["id"]

    response = api.get(f"/api/v1/messages/{message_id}/attachment", headers=auth_headers("t1"))
    assert response.status_code == 200
    assert response.content == b"2+2"

    response = api.get(f"/api/v1/messages/{message_id}", headers=auth_headers("s2"))
    assert response.status_code == 403


def test_support_de_cours_eleve_inscrit(api, classroom):
    response = api.post(
        "/api/v1/teaching-materials",
        data={"course_id": str(classroom["id"]), "name": "Chapitre 1"},
        files={"file": ("ch1.pdf", b"contenu", "application/pdf")},
        headers=auth_headers("t1"),
    )
    assert response.status_code == 201
    material_id = response.json()["id"]

    assert api.get(f"/api/v1/teaching-materials/{material_id}/file", headers=auth_headers("s1")).content == b"contenu"
    assert api.get(f"/api/v1/teaching-materials/{material_id}", headers=auth_headers("s2")).status_code == 403


def test_suppression_cours_utilise(api, classroom):
    response = api.delete(f"/api/v1/courses/{classroom['id']}", headers=auth_headers("t1"))
    assert response.status_code == 409
    assert response.json()["code"] == "COURSE_IN_USE"


# ============================================================
# Propriété : un compte étranger ne modifie jamais rien
# ============================================================

def test_aucune_mutation_par_un_compte_etranger(api, db, classroom):
    session = plan_session(api, classroom["id"]).json()
    homework = api.post(
        "/api/v1/homework", json={"session_id": session["id"], "name": "Fractions"}, headers=auth_headers("t1")
    ).json()
    payment = api.post(
        "/api/v1/payments",
        json={
            "student_username": "s1",
            "tutor_username": "t1",
            "amount_paid": "25.00",
            "means_of_payment": "CASH",
            "paid_on": datetime.now().isoformat(),
        },
        headers=auth_headers("t1"),
    ).json()
    note = api.post(
        "/api/v1/notes",
        json={"account_username": "s1", "date": datetime.now().isoformat(), "body": "privé"},
        headers=auth_headers("s1"),
    ).json()
    material = api.post(
        "/api/v1/teaching-materials",
        data={"course_id": str(classroom["id"]), "name": "Chapitre 1"},
        files={"file": ("ch1.pdf", b"contenu", "application/pdf")},
        headers=auth_headers("t1"),
    ).json()

    course_id = classroom["id"]
    attempts = [
        ("t2", "put", f"/api/v1/courses/{course_id}", {"name": "Piraté"}),
        ("t2", "delete", f"/api/v1/courses/{course_id}", None),
        ("t2", "put", f"/api/v1/sessions/{session['id']}", {"is_paid_for": True}),
        ("t2", "delete", f"/api/v1/sessions/{session['id']}", None),
        ("s2", "post", f"/api/v1/sessions/{session['id']}/accept", None),
        ("t2", "put", f"/api/v1/homework/{homework['id']}", {"name": "Piraté"}),
        ("t2", "delete", f"/api/v1/homework/{homework['id']}", None),
        ("t2", "put", f"/api/v1/payments/{payment['id']}", {"amount_paid": "1.00"}),
        ("t2", "delete", f"/api/v1/payments/{payment['id']}", None),
        ("s1", "put", f"/api/v1/payments/{payment['id']}", {"amount_paid": "1.00"}),
        ("s2", "put", f"/api/v1/notes/{note['id']}", {"body": "Piraté"}),
        ("t1", "delete", f"/api/v1/notes/{note['id']}", None),
        ("t2", "delete", f"/api/v1/enrollments/{course_id}/s1", None),
        ("s2", "delete", f"/api/v1/enrollments/{course_id}/s1", None),
        ("t2", "put", f"/api/v1/enrollments/{course_id}/s1", {"frequency": "quotidienne"}),
        ("s1", "put", f"/api/v1/enrollments/{course_id}/s1", {"frequency": "quotidienne"}),
        ("t2", "put", f"/api/v1/teaching-materials/{material['id']}", {"name": "Piraté"}),
        ("t2", "delete", f"/api/v1/teaching-materials/{material['id']}", None),
        ("s1", "put", f"/api/v1/teaching-materials/{material['id']}", {"name": "Piraté"}),
        ("s1", "delete", f"/api/v1/teaching-materials/{material['id']}", None),
    ]
    for username, method, url, body in attempts:
        kwargs = {"headers": auth_headers(username)}
        if body is not None:
            kwargs["json"] = body
        response = getattr(api, method)(url, **kwargs)
        assert response.status_code == 403, (username, method, url)

    # Rien n'a changé
    db.expire_all()
    assert api.get(f"/api/v1/courses/{course_id}", headers=auth_headers("t1")).json()["name"] == "Maths"
    assert api.get(f"/api/v1/sessions/{session['id']}", headers=auth_headers("t1")).json()["is_paid_for"] is False
    assert api.get(f"/api/v1/payments/{payment['id']}", headers=auth_headers("t1")).json()["amount_paid"] == "25.00"
    assert api.get(f"/api/v1/notes/{note['id']}", headers=auth_headers("s1")).json()["body"] == "privé"
    assert api.get(f"/api/v1/teaching-materials/{material['id']}", headers=auth_headers("t1")).json()["name"] == "Chapitre 1"
    assert api.get(f"/api/v1/enrollments/{course_id}/s1", headers=auth_headers("t1")).json()["frequency"] == "hebdomadaire"
    assert db.get(Account, "s1") is not None
