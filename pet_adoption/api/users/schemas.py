# pet_adoption/api/users/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

from pet_adoption.core.security import PASSWORD_REGEX, PASSWORD_POLICY_MSG
from pet_adoption.models.user import UserRole

ROLES = [r.value for r in UserRole]


def password_field(**kwargs):
    return fields.Str(validate=validate.Regexp(PASSWORD_REGEX, error=PASSWORD_POLICY_MSG), **kwargs)


class UserCreateSchema(Schema):
    """POST /admin/users: alta de usuario por un administrador."""
    class Meta:
        unknown = EXCLUDE

    nombre = fields.Str(required=True, validate=validate.Length(min=1, max=60),
                        error_messages={"required": "El nombre es obligatorio."})
    apellido = fields.Str(allow_none=True, validate=validate.Length(max=60))
    email = fields.Email(required=True, error_messages={"required": "El email es obligatorio."})
    contrasena = password_field(required=True, error_messages={"required": "La contraseña es obligatoria."})
    telefono = fields.Str(allow_none=True)
    direccion = fields.Str(allow_none=True)
    rol = fields.Str(load_default=UserRole.USUARIO.value, validate=validate.OneOf(ROLES))


class UserUpdateSchema(Schema):
    """PATCH /admin/users/<id>: actualización parcial."""
    class Meta:
        unknown = EXCLUDE

    nombre = fields.Str(validate=validate.Length(min=1, max=60))
    apellido = fields.Str(allow_none=True, validate=validate.Length(max=60))
    email = fields.Email()
    contrasena = password_field()
    telefono = fields.Str(allow_none=True)
    direccion = fields.Str(allow_none=True)
    rol = fields.Str(validate=validate.OneOf(ROLES))
    activo = fields.Bool()


class UserFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    nombre = fields.Str()
    apellido = fields.Str()
    email = fields.Str()
    rol = fields.Str(validate=validate.OneOf(ROLES))


class UserResponseSchema(Schema):
    """
    Usuario tal como lo recibe el frontend.
    Nunca incluye el hash de la contraseña ni el token de recuperación.
    """
    id = fields.Str(data_key="_id")
    nombre = fields.Str()
    apellido = fields.Str(allow_none=True)
    email = fields.Str()
    telefono = fields.Str(allow_none=True)
    direccion = fields.Str(allow_none=True)
    rol = fields.Str()
    activo = fields.Bool()
    foto_perfil = fields.Str(allow_none=True)
    fecha_registro = fields.DateTime(allow_none=True)
    borrado = fields.Bool(dump_default=False)
    borrado_en = fields.DateTime(data_key="borradoEn", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    updated_at = fields.DateTime(data_key="updatedAt", allow_none=True)


class UserOptionSchema(Schema):
    """GET /admin/users/all: opciones para los selectores del panel."""
    id = fields.Str(data_key="_id")
    nombre = fields.Str()
    apellido = fields.Str(allow_none=True)
    email = fields.Str()


class UserSummarySchema(Schema):
    """Usuario incrustado en mascotas, adopciones y mensajes."""
    id = fields.Str(data_key="_id")
    nombre = fields.Str()
    email = fields.Str()
    foto_perfil = fields.Str(allow_none=True)
