# eva/services/resources.py
"""
Registro de recursos CRUD. Cada entidad se describe como datos (reglas, columnas
de búsqueda/filtro/orden, relaciones a precargar, guards de borrado) y la sirve
el mismo ResourceStore + router genérico.
"""
from __future__ import annotations

from typing import Any, Callable

from sqlalchemy import func
from sqlalchemy.orm import Session

from eva.core.security import ADMIN, hash_password
from eva.db.models.area import Area
from eva.db.models.archivo import Archivo
from eva.db.models.calibracion import Calibracion
from eva.db.models.capacitacion import Capacitacion, CapacitacionParticipante
from eva.db.models.contacto import Contacto
from eva.db.models.contingencia import Contingencia
from eva.db.models.equipo import Equipo
from eva.db.models.mantenimiento import Mantenimiento
from eva.db.models.observacion import Observacion
from eva.db.models.propietario import Propietario
from eva.db.models.repuesto import MovimientoRepuesto, Repuesto
from eva.db.models.rol import Rol
from eva.db.models.servicio import Servicio
from eva.db.models.sesion_token import SesionToken
from eva.db.models.usuario import Usuario
from eva.schemas.areas import AreaOut
from eva.schemas.calibraciones import CalibracionOut
from eva.schemas.capacitaciones import CapacitacionOut
from eva.schemas.contactos import ContactoOut
from eva.schemas.contingencias import ContingenciaOut
from eva.schemas.equipos import EquipoOut
from eva.schemas.mantenimientos import MantenimientoOut
from eva.schemas.observaciones import ObservacionOut
from eva.schemas.propietarios import PropietarioOut
from eva.schemas.repuestos import RepuestoOut
from eva.schemas.roles import RolOut
from eva.schemas.servicios import ServicioOut
from eva.schemas.usuarios import UsuarioOut
from eva.services.resource_store import ResourceSpec
from eva.validation.rules import (
    AfterField, Exists, InChoices, IsBoolean, IsDate, IsEmail, IsInteger, IsNumeric,
    IsString, MaxLength, MinLength, MinValue, Nullable, Required, Unique,
)

# ───────────────────────────────────────────────────────────────────────────────
# Catálogos de valores
# ───────────────────────────────────────────────────────────────────────────────
RIESGOS = ("I", "IIA", "IIB", "III")
RIESGOS_CRITICOS = ("IIB", "III")

MANT_TIPOS = ("preventivo", "correctivo", "calibracion", "verificacion")
MANT_PRIORIDADES = ("baja", "media", "alta", "critica")
MANT_ESTADOS = ("programado", "en_proceso", "completado", "cancelado")
MANT_PENDIENTES = ("programado", "en_proceso")

CAL_TIPOS = ("interna", "externa", "verificacion", "ajuste")
CAL_ESTADOS = ("programada", "en_proceso", "completada", "vencida", "no_aplica")

CONT_SEVERIDADES = ("Baja", "Media", "Alta", "Crítica")
CONT_TIPOS = ("Falla", "Incidente", "Evento Adverso", "Mantenimiento Urgente")
CONT_ESTADOS = ("Abierto", "En Proceso", "Resuelto", "Cerrado")

CONTACTO_TIPOS = ("proveedor", "tecnico", "soporte", "comercial", "administrativo")
REPUESTO_ESTADOS = ("activo", "inactivo", "descontinuado")

CAP_TIPOS = ("induccion", "actualizacion", "especializacion", "certificacion")
CAP_MODALIDADES = ("presencial", "virtual", "mixta")
CAP_ESTADOS = ("programada", "en_curso", "completada", "cancelada")

OBS_TIPOS = ("preventivo", "correctivo", "calibracion", "inspeccion", "general")
OBS_ESTADOS = ("abierta", "en_proceso", "cerrada", "cancelada")
OBS_PRIORIDADES = ("baja", "media", "alta", "critica")


def _texto(n: int = 255, required: bool = False) -> list:
    return [Required() if required else Nullable(), IsString(), MaxLength(n)]

# ───────────────────────────────────────────────────────────────────────────────
# Guards de borrado (integridad referencial en la aplicación)
# ───────────────────────────────────────────────────────────────────────────────

def count_guard(model, fk: str, mensaje: str, *criterios) -> Callable[[Session, Any], str | None]:
    """Bloquea el borrado si hay hijos que cumplen `criterios`. `mensaje` recibe {n}."""
    def _guard(db: Session, obj) -> str | None:
        n = (
            db.query(func.count(model.id))
              .filter(getattr(model, fk) == obj.id, *criterios)
              .scalar()
        ) or 0
        return mensaje.format(n=n) if n > 0 else None
    return _guard


def state_guard(campo: str, bloqueados: tuple, mensaje: str) -> Callable[[Session, Any], str | None]:
    def _guard(db: Session, obj) -> str | None:
        return mensaje if getattr(obj, campo) in bloqueados else None
    return _guard


def unlink(model, fk: str, *criterios) -> Callable[[Session, Any], None]:
    """Deja en NULL la FK de hijos históricos/inactivos antes de borrar al padre."""
    def _hook(db: Session, obj) -> None:
        (
            db.query(model)
              .filter(getattr(model, fk) == obj.id, *criterios)
              .update({fk: None}, synchronize_session=False)
        )
    return _hook


def purge(model, fk: str) -> Callable[[Session, Any], None]:
    def _hook(db: Session, obj) -> None:
        db.query(model).filter(getattr(model, fk) == obj.id).delete(synchronize_session=False)
    return _hook


def _unlink_observaciones_de_mantenimientos(db: Session, equipo) -> None:
    """Las observaciones de otro equipo que citan un mantenimiento purgado quedan sueltas."""
    ids = db.query(Mantenimiento.id).filter(Mantenimiento.equipo_id == equipo.id)
    (
        db.query(Observacion)
          .filter(Observacion.mantenimiento_id.in_(ids.scalar_subquery()))
          .update({"mantenimiento_id": None}, synchronize_session=False)
    )

# ───────────────────────────────────────────────────────────────────────────────
# Hooks de guardado
# ───────────────────────────────────────────────────────────────────────────────

def _hash_password(db, data: dict, actor, obj) -> dict:
    if data.get("password"):
        data["password"] = hash_password(data["password"])
    return data


def _reporta_actor(db, data: dict, actor, obj) -> dict:
    if obj is None and actor and data.get("usuario_reporta") is None:
        data["usuario_reporta"] = actor.id
    return data

# ───────────────────────────────────────────────────────────────────────────────
# Recursos
# ───────────────────────────────────────────────────────────────────────────────

SERVICIOS = ResourceSpec(
    name="servicios",
    model=Servicio,
    label="Servicio",
    plural="Servicios",
    out_schema=ServicioOut,
    create_rules={
        "name": _texto(255, required=True),
        "description": [Nullable(), IsString()],
        "codigo": _texto(50) + [Unique(Servicio, "codigo")],
        "responsable": _texto(255),
        "telefono": _texto(50),
        "email": [Nullable(), IsEmail(), MaxLength(255)],
        "ubicacion": _texto(255),
        "activo": [IsBoolean()],
    },
    searchable=("name", "description", "codigo"),
    filterable=("activo",),
    sortable=("name", "codigo", "created_at", "updated_at"),
    status_field="activo",
    owner_field="usuario_id",
    audit=True,
    delete_guards=(
        count_guard(Area, "servicio_id",
                    "No se puede eliminar el servicio porque tiene {n} áreas asignadas",
                    Area.status == True),  # noqa: E712
        count_guard(Equipo, "servicio_id",
                    "No se puede eliminar el servicio porque tiene {n} equipos asignados",
                    Equipo.status == True),  # noqa: E712
        count_guard(Usuario, "servicio_id",
                    "No se puede eliminar el servicio porque tiene {n} usuarios asignados"),
    ),
    before_delete=(
        unlink(Area, "servicio_id"),
        unlink(Equipo, "servicio_id"),
    ),
)

AREAS = ResourceSpec(
    name="areas",
    model=Area,
    label="Área",
    plural="Áreas",
    femenino=True,
    out_schema=AreaOut,
    create_rules={
        "name": _texto(255, required=True),
        "description": [Nullable(), IsString()],
        "codigo": _texto(50) + [Unique(Area, "codigo")],
        "servicio_id": [Nullable(), IsInteger(), Exists(Servicio)],
        "piso": _texto(50),
        "capacidad": [Nullable(), IsInteger(), MinValue(1)],
        "responsable": _texto(255),
        "telefono": _texto(50),
        "status": [IsBoolean()],
    },
    searchable=("name", "description", "codigo", "piso"),
    filterable={"servicio_id": "servicio_id", "servicios": "servicio_id", "status": "status", "piso": "piso"},
    sortable=("name", "codigo", "piso", "created_at", "updated_at"),
    eager=("servicio",),
    status_field="status",
    owner_field="usuario_id",
    audit=True,
    delete_guards=(
        count_guard(Equipo, "area_id",
                    "No se puede eliminar el área porque tiene {n} equipos asignados",
                    Equipo.status == True),  # noqa: E712
    ),
    before_delete=(unlink(Equipo, "area_id"),),
)

PROPIETARIOS = ResourceSpec(
    name="propietarios",
    model=Propietario,
    label="Propietario",
    plural="Propietarios",
    out_schema=PropietarioOut,
    create_rules={
        "nombre": _texto(255, required=True),
        "codigo": _texto(50) + [Unique(Propietario, "codigo")],
        "descripcion": [Nullable(), IsString()],
        "contacto": _texto(255),
        "telefono": _texto(50),
        "email": [Nullable(), IsEmail(), MaxLength(255)],
        "direccion": _texto(255),
        "activo": [IsBoolean()],
    },
    searchable=("nombre", "codigo", "descripcion", "contacto"),
    filterable=("activo",),
    sortable=("nombre", "codigo", "created_at"),
    default_sort=("nombre", "asc"),
    status_field="activo",
    audit=True,
    delete_guards=(
        count_guard(Equipo, "propietario_id",
                    "No se puede eliminar el propietario porque tiene {n} equipos asociados"),
    ),
)

EQUIPOS = ResourceSpec(
    name="equipos",
    model=Equipo,
    label="Equipo",
    plural="Equipos",
    out_schema=EquipoOut,
    create_rules={
        "name": _texto(255, required=True),
        "code": _texto(100, required=True) + [Unique(Equipo, "code")],
        "marca": _texto(100),
        "modelo": _texto(100),
        "serial": _texto(100),
        "descripcion": [Nullable(), IsString()],
        "servicio_id": [Nullable(), IsInteger(), Exists(Servicio)],
        "area_id": [Nullable(), IsInteger(), Exists(Area)],
        "propietario_id": [Nullable(), IsInteger(), Exists(Propietario)],
        "riesgo": [Nullable(), InChoices(*RIESGOS)],
        "costo": [Nullable(), IsNumeric(), MinValue(0)],
        "fecha_adquisicion": [Nullable(), IsDate()],
        "fecha_instalacion": [Nullable(), IsDate(), AfterField("fecha_adquisicion", or_equal=True)],
        "vida_util": [Nullable(), IsInteger(), MinValue(0)],
        "fecha_mantenimiento": [Nullable(), IsDate()],
        "fecha_proximo_mantenimiento": [Nullable(), IsDate()],
        "status": [IsBoolean()],
    },
    searchable=("name", "code", "marca", "modelo", "serial"),
    filterable={
        "servicio_id": "servicio_id", "servicios": "servicio_id",
        "area_id": "area_id", "areas": "area_id",
        "propietario_id": "propietario_id",
        "riesgo": "riesgo", "status": "status", "marca": "marca",
    },
    sortable=("name", "code", "marca", "costo", "fecha_adquisicion", "created_at", "updated_at"),
    eager=("servicio", "area", "propietario"),
    status_field="status",
    owner_field="usuario_id",
    audit=True,
    delete_guards=(
        count_guard(Mantenimiento, "equipo_id",
                    "No se puede eliminar el equipo porque tiene {n} mantenimientos pendientes",
                    Mantenimiento.status.in_(MANT_PENDIENTES)),
        count_guard(Contingencia, "equipo_id",
                    "No se puede eliminar el equipo porque tiene {n} contingencias abiertas",
                    Contingencia.estado != "Cerrado"),
    ),
    before_delete=(
        purge(Observacion, "equipo_id"),
        _unlink_observaciones_de_mantenimientos,
        purge(Mantenimiento, "equipo_id"),
        purge(Calibracion, "equipo_id"),
        purge(Contingencia, "equipo_id"),
        unlink(Contacto, "equipo_id"),
        unlink(Repuesto, "equipo_id"),
        unlink(Archivo, "equipo_id"),
    ),
)

MANTENIMIENTOS = ResourceSpec(
    name="mantenimientos",
    model=Mantenimiento,
    label="Mantenimiento",
    plural="Mantenimientos",
    out_schema=MantenimientoOut,
    create_rules={
        "equipo_id": [Required(), IsInteger(), Exists(Equipo)],
        "description": _texto(500, required=True),
        "tipo": [Required(), InChoices(*MANT_TIPOS)],
        "prioridad": [InChoices(*MANT_PRIORIDADES)],
        "status": [InChoices(*MANT_ESTADOS)],
        "fecha_programada": [Required(), IsDate()],
        "fecha_inicio": [Nullable(), IsDate()],
        "fecha_fin": [Nullable(), IsDate(), AfterField("fecha_inicio", or_equal=True)],
        "tecnico_id": [Nullable(), IsInteger(), Exists(Usuario)],
        "proveedor": _texto(255),
        "costo": [Nullable(), IsNumeric(), MinValue(0)],
        "observaciones": [Nullable(), IsString()],
    },
    searchable=("description", "proveedor", "observaciones"),
    filterable=("equipo_id", "status", "tipo", "prioridad", "tecnico_id"),
    date_field="fecha_programada",
    sortable=("fecha_programada", "prioridad", "status", "created_at"),
    default_sort=("fecha_programada", "desc"),
    eager=("equipo", "tecnico"),
    owner_field="usuario_id",
    audit=True,
    delete_guards=(
        lambda db, m: None if m.status == "programado"
        else "Solo se pueden eliminar mantenimientos programados",
    ),
    before_delete=(unlink(Observacion, "mantenimiento_id"),),
)

CALIBRACIONES = ResourceSpec(
    name="calibraciones",
    model=Calibracion,
    label="Calibración",
    plural="Calibraciones",
    femenino=True,
    out_schema=CalibracionOut,
    create_rules={
        "equipo_id": [Required(), IsInteger(), Exists(Equipo)],
        "fecha": [Required(), IsDate()],
        "fecha_vencimiento": [Nullable(), IsDate(), AfterField("fecha")],
        "tipo": [Required(), InChoices(*CAL_TIPOS)],
        "estado": [InChoices(*CAL_ESTADOS)],
        "proveedor": _texto(255),
        "certificado": _texto(255),
        "observaciones": [Nullable(), IsString()],
        "costo": [Nullable(), IsNumeric(), MinValue(0)],
    },
    searchable=("proveedor", "certificado", "observaciones"),
    filterable=("equipo_id", "estado", "tipo"),
    date_field="fecha",
    sortable=("fecha", "fecha_vencimiento", "estado", "created_at"),
    default_sort=("fecha", "desc"),
    eager=("equipo",),
    owner_field="usuario_id",
    audit=True,
    delete_guards=(
        state_guard("estado", ("completada",), "No se puede eliminar una calibración completada"),
    ),
)

CONTINGENCIAS = ResourceSpec(
    name="contingencias",
    model=Contingencia,
    label="Contingencia",
    plural="Contingencias",
    femenino=True,
    out_schema=ContingenciaOut,
    create_rules={
        "equipo_id": [Required(), IsInteger(), Exists(Equipo)],
        "fecha": [Required(), IsDate(with_time=True)],
        "observacion": [Required(), IsString()],
        "severidad": [Required(), InChoices(*CONT_SEVERIDADES)],
        "tipo": [Nullable(), InChoices(*CONT_TIPOS)],
        "estado": [InChoices(*CONT_ESTADOS)],
        "usuario_reporta": [Nullable(), IsInteger(), Exists(Usuario)],
        "usuario_asignado": [Nullable(), IsInteger(), Exists(Usuario)],
        "solucion": [Nullable(), IsString(), MaxLength(1000)],
    },
    searchable=("observacion", "solucion"),
    filterable=("equipo_id", "estado", "severidad", "tipo", "usuario_asignado"),
    date_field="fecha",
    sortable=("fecha", "severidad", "estado", "created_at"),
    default_sort=("fecha", "desc"),
    eager=("equipo",),
    audit=True,
    delete_guards=(
        lambda db, c: None if c.estado == "Abierto"
        else "Solo se pueden eliminar contingencias en estado Abierto",
    ),
    before_save=(_reporta_actor,),
)

CONTACTOS = ResourceSpec(
    name="contactos",
    model=Contacto,
    label="Contacto",
    plural="Contactos",
    out_schema=ContactoOut,
    create_rules={
        "nombre": _texto(255, required=True),
        "email": [Nullable(), IsEmail(), MaxLength(255)],
        "telefono": _texto(50),
        "cargo": _texto(100),
        "empresa": _texto(255),
        "tipo": [Nullable(), InChoices(*CONTACTO_TIPOS)],
        "equipo_id": [Nullable(), IsInteger(), Exists(Equipo)],
        "activo": [IsBoolean()],
    },
    searchable=("nombre", "email", "empresa", "cargo"),
    filterable=("equipo_id", "tipo", "activo"),
    sortable=("nombre", "empresa", "created_at"),
    default_sort=("nombre", "asc"),
    eager=("equipo",),
    status_field="activo",
)

_REPUESTO_RULES = {
    "nombre": _texto(255, required=True),
    "codigo": _texto(100, required=True) + [Unique(Repuesto, "codigo")],
    "descripcion": [Nullable(), IsString()],
    "categoria": _texto(100, required=True),
    "marca": _texto(100),
    "modelo": _texto(100),
    "stock_actual": [Required(), IsInteger(), MinValue(0)],
    "stock_minimo": [Required(), IsInteger(), MinValue(0)],
    "precio_unitario": [Nullable(), IsNumeric(), MinValue(0)],
    "unidad_medida": _texto(50, required=True),
    "ubicacion": _texto(255),
    "equipo_id": [Nullable(), IsInteger(), Exists(Equipo)],
    "critico": [IsBoolean()],
    "estado": [InChoices(*REPUESTO_ESTADOS)],
}

REPUESTOS = ResourceSpec(
    name="repuestos",
    model=Repuesto,
    label="Repuesto",
    plural="Repuestos",
    out_schema=RepuestoOut,
    create_rules=_REPUESTO_RULES,
    # el stock solo cambia vía entrada/salida (queda el movimiento)
    update_rules={k: v for k, v in _REPUESTO_RULES.items() if k != "stock_actual"},
    searchable=("nombre", "codigo", "descripcion", "marca", "modelo"),
    filterable=("categoria", "estado", "critico", "equipo_id"),
    sortable=("nombre", "codigo", "categoria", "stock_actual", "created_at"),
    default_sort=("nombre", "asc"),
    eager=("equipo",),
    audit=True,
    delete_guards=(
        count_guard(MovimientoRepuesto, "repuesto_id",
                    "No se puede eliminar el repuesto porque tiene movimientos registrados"),
    ),
)

_CAPACITACION_RULES = {
    "titulo": _texto(255, required=True),
    "descripcion": [Required(), IsString()],
    "tipo": [Required(), InChoices(*CAP_TIPOS)],
    "modalidad": [Required(), InChoices(*CAP_MODALIDADES)],
    "fecha_inicio": [Required(), IsDate(with_time=True)],
    "fecha_fin": [Required(), IsDate(with_time=True), AfterField("fecha_inicio", or_equal=True)],
    "duracion_horas": [Required(), IsInteger(), MinValue(1)],
    "instructor_id": [Required(), IsInteger(), Exists(Usuario)],
    "lugar": _texto(255),
    "capacidad_maxima": [Nullable(), IsInteger(), MinValue(1)],
    "costo": [Nullable(), IsNumeric(), MinValue(0)],
    "certificacion": [IsBoolean()],
    "tema": _texto(255),
    "objetivos": [Nullable(), IsString()],
    "requisitos": [Nullable(), IsString()],
}

CAPACITACIONES = ResourceSpec(
    name="capacitaciones",
    model=Capacitacion,
    label="Capacitación",
    plural="Capacitaciones",
    femenino=True,
    out_schema=CapacitacionOut,
    # el estado solo avanza por iniciar/finalizar/cancelar
    create_rules=_CAPACITACION_RULES,
    searchable=("titulo", "descripcion", "tema"),
    filterable=("estado", "tipo", "modalidad", "instructor_id"),
    date_field="fecha_inicio",
    sortable=("fecha_inicio", "titulo", "estado", "created_at"),
    default_sort=("fecha_inicio", "desc"),
    eager=("instructor",),
    owner_field="usuario_id",
    audit=True,
    delete_guards=(
        lambda db, c: None if c.estado == "programada"
        else "Solo se pueden eliminar capacitaciones programadas",
    ),
    before_delete=(purge(CapacitacionParticipante, "capacitacion_id"),),
)

OBSERVACIONES = ResourceSpec(
    name="observaciones",
    model=Observacion,
    label="Observación",
    plural="Observaciones",
    femenino=True,
    out_schema=ObservacionOut,
    create_rules={
        "descripcion": _texto(500, required=True),
        "observacion": [Required(), IsString()],
        "recomendacion": [Nullable(), IsString()],
        "tipo": [InChoices(*OBS_TIPOS)],
        # cerrada solo vía /cerrar (exige solución)
        "estado": [InChoices("abierta", "en_proceso", "cancelada")],
        "prioridad": [InChoices(*OBS_PRIORIDADES)],
        "equipo_id": [Nullable(), IsInteger(), Exists(Equipo)],
        "mantenimiento_id": [Nullable(), IsInteger(), Exists(Mantenimiento)],
        "fecha": [Required(), IsDate()],
        "fecha_limite": [Nullable(), IsDate(), AfterField("fecha")],
        "responsable_id": [Nullable(), IsInteger(), Exists(Usuario)],
        "costo_estimado": [Nullable(), IsNumeric(), MinValue(0)],
        "tiempo_estimado": [Nullable(), IsInteger(), MinValue(1)],
    },
    searchable=("descripcion", "observacion", "recomendacion"),
    filterable=("equipo_id", "mantenimiento_id", "estado", "tipo", "prioridad", "responsable_id"),
    date_field="fecha",
    sortable=("fecha", "fecha_limite", "prioridad", "estado", "created_at"),
    default_sort=("fecha", "desc"),
    eager=("equipo", "responsable"),
    owner_field="usuario_id",
    audit=True,
)

USUARIOS = ResourceSpec(
    name="usuarios",
    model=Usuario,
    label="Usuario",
    plural="Usuarios",
    out_schema=UsuarioOut,
    create_rules={
        "nombre": _texto(255, required=True),
        "apellido": _texto(255, required=True),
        "email": [Required(), IsEmail(), MaxLength(255), Unique(Usuario, "email")],
        "username": _texto(100, required=True) + [Unique(Usuario, "username")],
        "password": [Required(), IsString(), MinLength(6)],
        "telefono": _texto(50),
        "rol_id": [Required(), IsInteger(), Exists(Rol)],
        "servicio_id": [Nullable(), IsInteger(), Exists(Servicio)],
        "estado": [IsBoolean()],
    },
    searchable=("nombre", "apellido", "email", "username"),
    filterable=("rol_id", "servicio_id", "estado"),
    sortable=("nombre", "apellido", "username", "email", "created_at", "ultimo_acceso"),
    eager=("rol", "servicio"),
    status_field="estado",
    audit=True,
    write_roles=(ADMIN,),
    delete_guards=(
        count_guard(Mantenimiento, "tecnico_id",
                    "No se puede eliminar el usuario porque tiene {n} mantenimientos asignados"),
        count_guard(Contingencia, "usuario_reporta",
                    "No se puede eliminar el usuario porque tiene {n} contingencias reportadas"),
        count_guard(Capacitacion, "instructor_id",
                    "No se puede eliminar el usuario porque tiene {n} capacitaciones como instructor"),
    ),
    before_save=(_hash_password,),
    before_delete=(
        purge(SesionToken, "usuario_id"),
        unlink(Contingencia, "usuario_asignado"),
        purge(CapacitacionParticipante, "usuario_id"),
        unlink(Observacion, "responsable_id"),
        unlink(Observacion, "cerrada_por"),
    ),
)

ROLES = ResourceSpec(
    name="roles",
    model=Rol,
    label="Rol",
    plural="Roles",
    out_schema=RolOut,
    create_rules={
        "nombre": _texto(100, required=True) + [Unique(Rol, "nombre")],
        "descripcion": [Nullable(), IsString()],
        "activo": [IsBoolean()],
    },
    searchable=("nombre", "descripcion"),
    filterable=("activo",),
    sortable=("nombre", "created_at"),
    default_sort=("nombre", "asc"),
    status_field="activo",
    audit=True,
    write_roles=(ADMIN,),
    delete_guards=(
        count_guard(Usuario, "rol_id",
                    "No se puede eliminar el rol porque tiene {n} usuarios asignados"),
    ),
)

REGISTRY: dict[str, ResourceSpec] = {
    spec.name: spec
    for spec in (
        SERVICIOS, AREAS, PROPIETARIOS, EQUIPOS, MANTENIMIENTOS, CALIBRACIONES,
        CONTINGENCIAS, CONTACTOS, REPUESTOS, CAPACITACIONES, OBSERVACIONES,
        USUARIOS, ROLES,
    )
}
