from peewee import (
    CharField,
    DateField,
    DateTimeField,
    ForeignKeyField,
    IntegerField,
    Model,
    TextField,
    UUIDField,
)
from infrastructure.peewee.session.db import db


class BaseModel(Model):
    class Meta:
        database = db


class TableroModel(BaseModel):
    id = UUIDField(primary_key=True)
    titulo = CharField()
    descripcion = TextField(null=True)
    creado_en = DateTimeField()

    class Meta:
        table_name = "tableros"


class ColumnaModel(BaseModel):
    id = UUIDField(primary_key=True)
    tablero = ForeignKeyField(TableroModel, backref="columnas", on_delete="CASCADE")
    titulo = CharField()
    color = CharField()
    posicion = IntegerField()

    class Meta:
        table_name = "columnas"
        indexes = ((("tablero", "posicion"), True),)


class TareaModel(BaseModel):
    id = UUIDField(primary_key=True)
    columna = ForeignKeyField(ColumnaModel, backref="tareas", on_delete="CASCADE")
    titulo = CharField()
    descripcion = TextField(null=True)
    prioridad = CharField(default="MEDIUM")
    fecha_limite = DateField(null=True)
    posicion = IntegerField()

    class Meta:
        table_name = "tareas"
        indexes = ((("columna", "posicion"), True),)


MODELOS = [TableroModel, ColumnaModel, TareaModel]
