# pet_adoption/api/auth/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError, EXCLUDE

from pet_adoption.api.users.schemas import password_field


class RegisterSchema(Schema):
    """POST /auth/register"""
    class Meta:
        unknown = EXCLUDE

    nombre = fields.Str(required=True, validate=validate.Length(min=1, max=60),
                        error_messages={"required": "Nombre, email y contraseña son obligatorios"})
    apellido = fields.Str(allow_none=True, validate=validate.Length(max=60))
    email = fields.Email(required=True, error_messages={"required": "Nombre, email y contraseña son obligatorios"})
    contrasena = password_field(required=True,
                                error_messages={"required": "Nombre, email y contraseña son obligatorios"})


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Str(required=True, error_messages={"required": "El email es obligatorio."})
    contrasena = fields.Str(required=True, error_messages={"required": "La contraseña es obligatoria."})


class ForgotPasswordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, error_messages={"required": "El email es obligatorio."})


class ResetPasswordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    nuevaContrasena = password_field(required=True,
                                     error_messages={"required": "La nueva contraseña es obligatoria."})


class ChangePasswordSchema(Schema):
    """PATCH /auth/cambiar-password"""
    class Meta:
        unknown = EXCLUDE

    nuevaPassword = password_field(required=True)
    confirmarPassword = fields.Str(required=True)

    @validates_schema
    def validate_confirmation(self, data, **kwargs):
        if data.get('nuevaPassword') != data.get('confirmarPassword'):
            raise ValidationError("Las contraseñas no coinciden", field_name="confirmarPassword")


class ProfileUpdateSchema(Schema):
    """PATCH /auth/perfil (JSON o multipart con 'fotoPerfil')."""
    class Meta:
        unknown = EXCLUDE

    nombre = fields.Str(validate=validate.Length(min=1, max=60))
    apellido = fields.Str(allow_none=True, validate=validate.Length(max=60))
    telefono = fields.Str(allow_none=True)
    direccion = fields.Str(allow_none=True)


class LoginUserSchema(Schema):
    """Datos del usuario devueltos junto al token."""
    id = fields.Str()
    nombre = fields.Str()
    apellido = fields.Str(allow_none=True)
    rol = fields.Function(lambda user: user.rol.value)
    email = fields.Str()
