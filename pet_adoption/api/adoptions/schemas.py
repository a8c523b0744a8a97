# pet_adoption/api/adoptions/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

from pet_adoption.api.pets.schemas import PetSummarySchema
from pet_adoption.api.users.schemas import UserSummarySchema
from pet_adoption.models.adoption import AdoptionStatus

ADOPTION_STATUSES = [s.value for s in AdoptionStatus]


class AdoptionCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    id_mascota = fields.Str(required=True, validate=validate.Length(min=1),
                            error_messages={"required": "Debe incluir id_mascota y mensaje"})
    mensaje = fields.Str(required=True, validate=validate.Length(min=1, max=1000),
                         error_messages={"required": "Debe incluir id_mascota y mensaje"})
    email_usuario = fields.Email()


class AdoptionUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    mensaje = fields.Str(validate=validate.Length(min=1, max=1000))
    estado = fields.Str(validate=validate.OneOf(ADOPTION_STATUSES))


class AdoptionFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    estado = fields.Str(validate=validate.OneOf(ADOPTION_STATUSES))


class AdoptionResponseSchema(Schema):
    id = fields.Str(data_key="_id")
    id_usuario = fields.Nested(UserSummarySchema, allow_none=True)
    id_mascota = fields.Nested(PetSummarySchema, allow_none=True)
    fecha_solicitud = fields.DateTime(allow_none=True)
    estado = fields.Str()
    mensaje = fields.Str()
    borrado = fields.Bool(dump_default=False)
    borrado_en = fields.DateTime(data_key="borradoEn", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    updated_at = fields.DateTime(data_key="updatedAt", allow_none=True)
