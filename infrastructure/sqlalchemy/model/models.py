from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from infrastructure.sqlalchemy.session.db import Base


class TableroModel(Base):
    __tablename__ = "tableros"

    id = Column(String(36), primary_key=True, index=True)
    titulo = Column(String, nullable=False)
    descripcion = Column(Text, nullable=True)
    creado_en = Column(DateTime, nullable=False)


class ColumnaModel(Base):
    __tablename__ = "columnas"
    __table_args__ = (
        UniqueConstraint("tablero_id", "posicion", name="uq_columnas_tablero_posicion"),
    )

    id = Column(String(36), primary_key=True, index=True)
    tablero_id = Column(
        String(36), ForeignKey("tableros.id", ondelete="CASCADE"), nullable=False
    )
    titulo = Column(String, nullable=False)
    color = Column(String, nullable=False)
    posicion = Column(Integer, nullable=False)


class TareaModel(Base):
    __tablename__ = "tareas"
    __table_args__ = (
        UniqueConstraint("columna_id", "posicion", name="uq_tareas_columna_posicion"),
    )

    id = Column(String(36), primary_key=True, index=True)
    columna_id = Column(
        String(36), ForeignKey("columnas.id", ondelete="CASCADE"), nullable=False
    )
    titulo = Column(String, nullable=False)
    descripcion = Column(Text, nullable=True)
    prioridad = Column(String, nullable=False, default="MEDIUM")
    fecha_limite = Column(Date, nullable=True)
    posicion = Column(Integer, nullable=False)
