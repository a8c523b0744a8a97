# pet_adoption/api/pets/schemas.py
from marshmallow import Schema, fields, validate, pre_load, EXCLUDE

from pet_adoption.api.users.schemas import UserSummarySchema
from pet_adoption.models.pet import PetType, PetGender, PetSize

PET_TYPES = [e.value for e in PetType]
PET_GENDERS = [e.value for e in PetGender]
PET_SIZES = [e.value for e in PetSize]


class _FormSchema(Schema):
    """Base para formularios que pueden llegar en multipart: los campos vacíos se ignoran."""
    class Meta:
        unknown = EXCLUDE

    @pre_load
    def drop_empty_strings(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        return {k: v for k, v in data.items() if not (isinstance(v, str) and v.strip() == '')}


class PetCreateSchema(_FormSchema):
    """POST /mascotas (JSON o multipart con 'foto')."""
    nombre = fields.Str(required=True, validate=validate.Length(min=1, max=60),
                        error_messages={"required": "El nombre es obligatorio."})
    tipo = fields.Str(required=True, validate=validate.OneOf(PET_TYPES),
                      error_messages={"required": "El tipo es obligatorio."})
    edad = fields.Float(allow_none=True, validate=validate.Range(min=0))
    raza = fields.Str(allow_none=True)
    genero = fields.Str(allow_none=True, validate=validate.OneOf(PET_GENDERS))
    tamano = fields.Str(allow_none=True, validate=validate.OneOf(PET_SIZES))
    descripcion = fields.Str(allow_none=True, validate=validate.Length(max=1000))
    ubicacion = fields.Str(allow_none=True)
    telefono = fields.Str(allow_none=True)
    estado = fields.Bool(load_default=True)
    # Solo lo tiene en cuenta un admin, para publicar en nombre de otro usuario
    email_usuario = fields.Email()


class PetUpdateSchema(_FormSchema):
    """PATCH /mascotas/<id>: actualización parcial."""
    nombre = fields.Str(validate=validate.Length(min=1, max=60))
    tipo = fields.Str(validate=validate.OneOf(PET_TYPES))
    edad = fields.Float(allow_none=True, validate=validate.Range(min=0))
    raza = fields.Str(allow_none=True)
    genero = fields.Str(allow_none=True, validate=validate.OneOf(PET_GENDERS))
    tamano = fields.Str(allow_none=True, validate=validate.OneOf(PET_SIZES))
    descripcion = fields.Str(allow_none=True, validate=validate.Length(max=1000))
    ubicacion = fields.Str(allow_none=True)
    telefono = fields.Str(allow_none=True)
    estado = fields.Bool()
    email_usuario = fields.Email()


class PetFilterSchema(_FormSchema):
    nombre = fields.Str()
    raza = fields.Str()
    ubicacion = fields.Str()
    tipo = fields.Str(validate=validate.OneOf(PET_TYPES))
    tamano = fields.Str(validate=validate.OneOf(PET_SIZES))
    genero = fields.Str(validate=validate.OneOf(PET_GENDERS))
    estado = fields.Bool()


class PetSummarySchema(Schema):
    """Mascota incrustada en las solicitudes de adopción."""
    id = fields.Str(data_key="_id")
    nombre = fields.Str()
    tipo = fields.Str()
    raza = fields.Str(allow_none=True)


class PetResponseSchema(Schema):
    id = fields.Str(data_key="_id")
    nombre = fields.Str()
    edad = fields.Float(allow_none=True)
    tipo = fields.Str()
    raza = fields.Str(allow_none=True)
    genero = fields.Str(allow_none=True)
    tamano = fields.Str(allow_none=True)
    descripcion = fields.Str(allow_none=True)
    fotos = fields.List(fields.Str(), dump_default=list)
    ubicacion = fields.Str(allow_none=True)
    telefono = fields.Str(allow_none=True)
    estado = fields.Bool()
    fecha_publicacion = fields.DateTime(allow_none=True)
    id_usuario = fields.Nested(UserSummarySchema, allow_none=True)
    borrado = fields.Bool(dump_default=False)
    borrado_en = fields.DateTime(data_key="borradoEn", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    updated_at = fields.DateTime(data_key="updatedAt", allow_none=True)
