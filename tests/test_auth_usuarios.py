"""Autenticación, perfil propio y gestión de usuarios."""
import pytest

API = "/api/v1"

REGISTRO = {
    "nombre": "Carla",
    "apellido": "Gómez",
    "numero_documento": "55501",
    "email": "carla@test.co",
    "password": "clave123",
}


async def test_registro_y_login(client):
    r = await client.post(f"{API}/auth/registro", json=REGISTRO)
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["usuario"]["rol"] == "aprendiz"
    assert data["token_type"] == "bearer"

    r = await client.post(f"{API}/auth/login", json={"email": "carla@test.co", "password": "clave123"})
    assert r.status_code == 200
    token = r.json()["data"]["access_token"]

    r = await client.get(f"{API}/me", headers={"Authorization": f"Bearer {token}"})
    assert r.json()["data"]["email"] == "carla@test.co"


async def test_registro_repetido(client):
    await client.post(f"{API}/auth/registro", json=REGISTRO)
    r = await client.post(f"{API}/auth/registro", json=REGISTRO)
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "El usuario ya existe"}


async def test_registro_no_permite_admin(client):
    r = await client.post(f"{API}/auth/registro", json={**REGISTRO, "rol": "admin"})
    assert r.status_code == 400
    assert isinstance(r.json()["error"], list)


async def test_login_incorrecto(client, escenario, password):
    r = await client.post(f"{API}/auth/login", json={"email": "instructor@test.co", "password": "otra"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "Credenciales inválidas"}

    r = await client.post(f"{API}/auth/login", json={"email": "instructor@test.co", "password": password})
    assert r.status_code == 200


@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Bearer no-es-un-jwt"}, {"Authorization": "Basic abc"}],
)
async def test_rutas_protegidas_exigen_token(client, headers):
    r = await client.get(f"{API}/cursos", headers=headers)
    assert r.status_code == 401
    assert r.json()["success"] is False


async def test_usuario_inactivo(client, escenario):
    r = await client.put(
        f"{API}/usuarios/{escenario.ids['aprendiz3']}",
        json={"estado": "inactivo"},
        headers=escenario.headers("admin"),
    )
    assert r.status_code == 200
    r = await client.get(f"{API}/me", headers=escenario.headers("aprendiz3"))
    assert r.status_code == 403


async def test_actualizar_perfil_y_contrasena(client, escenario, password):
    headers = escenario.headers("aprendiz")
    r = await client.patch(f"{API}/me", json={"nombre": "Luisa"}, headers=headers)
    assert r.json()["data"]["nombre"] == "Luisa"

    r = await client.patch(f"{API}/me", json={}, headers=headers)
    assert r.status_code == 400

    r = await client.post(
        f"{API}/me/cambiar-contrasena",
        json={"contrasena_actual": "equivocada", "contrasena_nueva": "nueva123"},
        headers=headers,
    )
    assert r.status_code == 400
    r = await client.post(
        f"{API}/me/cambiar-contrasena",
        json={"contrasena_actual": password, "contrasena_nueva": "nueva123"},
        headers=headers,
    )
    assert r.status_code == 200
    r = await client.post(f"{API}/auth/login", json={"email": "aprendiz@test.co", "password": "nueva123"})
    assert r.status_code == 200


@pytest.mark.parametrize("quien,esperado", [("aprendiz", 403), ("instructor", 200), ("admin", 200)])
async def test_listar_usuarios(client, escenario, quien, esperado):
    r = await client.get(f"{API}/usuarios", headers=escenario.headers(quien))
    assert r.status_code == esperado


async def test_listar_por_rol(client, escenario):
    r = await client.get(f"{API}/usuarios/rol/aprendiz", headers=escenario.headers("instructor"))
    assert r.json()["count"] == 3
    assert {u["rol"] for u in r.json()["data"]} == {"aprendiz"}

    r = await client.get(f"{API}/usuarios/rol/otro", headers=escenario.headers("instructor"))
    assert r.status_code == 400


async def test_aprendiz_no_cambia_su_rol(client, escenario):
    url = f"{API}/usuarios/{escenario.ids['aprendiz']}"
    r = await client.put(url, json={"rol": "instructor"}, headers=escenario.headers("aprendiz"))
    assert r.status_code == 403
    r = await client.put(url, json={"apellido": "Pérez"}, headers=escenario.headers("aprendiz"))
    assert r.status_code == 200
    assert r.json()["data"]["rol"] == "aprendiz"


async def test_solo_admin_asigna_admin(client, escenario):
    url = f"{API}/usuarios/{escenario.ids['aprendiz2']}"
    r = await client.put(url, json={"rol": "admin"}, headers=escenario.headers("instructor"))
    assert r.status_code == 403
    r = await client.put(url, json={"rol": "admin"}, headers=escenario.headers("admin"))
    assert r.json()["data"]["rol"] == "admin"


@pytest.mark.parametrize(
    "quien,objetivo,rol",
    [
        ("otro_instructor", "instructor", "aprendiz"),
        ("instructor", "instructor", "aprendiz"),
        ("instructor", "aprendiz", "instructor"),
        ("admin", "aprendiz", "instructor"),
    ],
)
async def test_no_cambia_rol_de_quien_tiene_cursos(client, escenario, quien, objetivo, rol):
    url = f"{API}/usuarios/{escenario.ids[objetivo]}"
    r = await client.put(url, json={"rol": rol}, headers=escenario.headers(quien))
    assert r.status_code == 400
    assert r.json()["success"] is False

    r = await client.get(f"{API}/cursos/{escenario.curso_id}", headers=escenario.headers("admin"))
    assert r.json()["data"]["instructor_id"] == escenario.ids["instructor"]
    assert r.json()["data"]["estudiantes"] == [escenario.ids["aprendiz"]]
    r = await client.get(url, headers=escenario.headers("admin"))
    assert r.json()["data"]["rol"] != rol


async def test_cambia_rol_sin_cursos(client, escenario):
    url = f"{API}/usuarios/{escenario.ids['otro_instructor']}"
    r = await client.put(url, json={"rol": "aprendiz"}, headers=escenario.headers("admin"))
    assert r.status_code == 200
    assert r.json()["data"]["rol"] == "aprendiz"


async def test_correo_repetido_es_conflicto(client, escenario):
    r = await client.put(
        f"{API}/usuarios/{escenario.ids['aprendiz']}",
        json={"email": "aprendiz2@test.co"},
        headers=escenario.headers("admin"),
    )
    assert r.status_code == 400


async def test_no_se_elimina_instructor_con_cursos(client, escenario):
    admin = escenario.headers("admin")
    r = await client.delete(f"{API}/usuarios/{escenario.ids['instructor']}", headers=admin)
    assert r.status_code == 400
    r = await client.delete(f"{API}/usuarios/{escenario.ids['otro_instructor']}", headers=admin)
    assert r.status_code == 200
    r = await client.get(f"{API}/usuarios/{escenario.ids['otro_instructor']}", headers=admin)
    assert r.status_code == 404


async def test_eliminar_aprendiz_lo_retira_del_curso(client, escenario):
    admin = escenario.headers("admin")
    r = await client.delete(f"{API}/usuarios/{escenario.ids['aprendiz']}", headers=admin)
    assert r.status_code == 200
    r = await client.get(f"{API}/cursos/{escenario.curso_id}", headers=admin)
    assert r.json()["data"]["estudiantes"] == []


async def test_salud(client):
    r = await client.get("/health")
    assert r.json()["status"] == "ok"
