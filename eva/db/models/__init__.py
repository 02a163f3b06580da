# Registra todos los modelos en Base.metadata (create_all y relaciones por nombre)
from eva.db.models.rol import Rol                                 # noqa: F401
from eva.db.models.usuario import Usuario                         # noqa: F401
from eva.db.models.sesion_token import SesionToken                # noqa: F401
from eva.db.models.servicio import Servicio                       # noqa: F401
from eva.db.models.area import Area                               # noqa: F401
from eva.db.models.propietario import Propietario                 # noqa: F401
from eva.db.models.equipo import Equipo                           # noqa: F401
from eva.db.models.mantenimiento import Mantenimiento             # noqa: F401
from eva.db.models.calibracion import Calibracion                 # noqa: F401
from eva.db.models.contingencia import Contingencia               # noqa: F401
from eva.db.models.contacto import Contacto                       # noqa: F401
from eva.db.models.repuesto import Repuesto, MovimientoRepuesto   # noqa: F401
from eva.db.models.archivo import Archivo                         # noqa: F401
from eva.db.models.auditoria import AuditoriaLog                  # noqa: F401
from eva.db.models.capacitacion import Capacitacion, CapacitacionParticipante  # noqa: F401
from eva.db.models.observacion import Observacion                 # noqa: F401
