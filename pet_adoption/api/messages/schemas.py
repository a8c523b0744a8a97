# pet_adoption/api/messages/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

from pet_adoption.api.users.schemas import UserSummarySchema
from pet_adoption.models.message import MessageType, MessageStatus

MESSAGE_TYPES = [t.value for t in MessageType]
MESSAGE_STATUSES = [s.value for s in MessageStatus]
REQUIRED_MSG = "Debe incluir asunto, contenido y tipo"


class MessageCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    asunto = fields.Str(required=True, validate=validate.Length(min=1, max=150),
                        error_messages={"required": REQUIRED_MSG})
    contenido = fields.Str(required=True, validate=validate.Length(min=1, max=5000),
                           error_messages={"required": REQUIRED_MSG})
    tipo = fields.Str(required=True, validate=validate.OneOf(MESSAGE_TYPES),
                      error_messages={"required": REQUIRED_MSG})
    # Solo para administradores
    estado = fields.Str(validate=validate.OneOf(MESSAGE_STATUSES))
    email_usuario = fields.Email()


class MessageUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    asunto = fields.Str(validate=validate.Length(min=1, max=150))
    contenido = fields.Str(validate=validate.Length(min=1, max=5000))
    tipo = fields.Str(validate=validate.OneOf(MESSAGE_TYPES))
    estado = fields.Str(validate=validate.OneOf(MESSAGE_STATUSES))


class MessageFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    asunto = fields.Str()
    tipo = fields.Str(validate=validate.OneOf(MESSAGE_TYPES))
    estado = fields.Str(validate=validate.OneOf(MESSAGE_STATUSES))


class MessageResponseSchema(Schema):
    id = fields.Str(data_key="_id")
    id_usuario = fields.Nested(UserSummarySchema, allow_none=True)
    asunto = fields.Str()
    contenido = fields.Str()
    tipo = fields.Str()
    estado = fields.Str()
    fecha_envio = fields.DateTime(allow_none=True)
    borrado = fields.Bool(dump_default=False)
    borrado_en = fields.DateTime(data_key="borradoEn", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    updated_at = fields.DateTime(data_key="updatedAt", allow_none=True)
