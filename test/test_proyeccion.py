"""
Tests de la proyección optimista: transformaciones puras y reconciliación.
"""

import pytest
from uuid import uuid4

from core.application.proyeccion import (
    ProyeccionOptimista,
    aplicar_intencion,
    aplicar_movimiento,
    aplicar_reordenamiento,
    filtrar_tareas,
)
from core.domain.models.intencion import MoverEntreColumnas, ReordenarEnColumna

from fabricas import construir_snapshot, titulos


@pytest.fixture
def tablero():
    return construir_snapshot({"A": ["T1", "T2", "T3"], "B": ["T4"], "C": []})


class TestAplicarReordenamiento:
    def test_reinserta_y_renumera(self, tablero):
        snapshot, ids = tablero

        nuevo = aplicar_reordenamiento(snapshot, ids["A"], ids["T1"], 2)

        assert titulos(nuevo, ids["A"]) == ["T2", "T3", "T1"]
        assert [t.posicion for t in nuevo.columna(ids["A"]).tareas] == [0, 1, 2]
        # El snapshot original no cambia.
        assert titulos(snapshot, ids["A"]) == ["T1", "T2", "T3"]
        assert snapshot.columna(ids["A"]).tareas[0].posicion == 0

    @pytest.mark.parametrize("columna, tarea", [("B", "T1"), (None, "T1"), ("A", None)])
    def test_sin_columna_o_tarea_devuelve_el_mismo_snapshot(self, tablero, columna, tarea):
        snapshot, ids = tablero
        columna_id = ids[columna] if columna else uuid4()
        tarea_id = ids[tarea] if tarea else uuid4()

        assert aplicar_reordenamiento(snapshot, columna_id, tarea_id, 0) is snapshot

    def test_mismo_indice_devuelve_el_mismo_snapshot(self, tablero):
        snapshot, ids = tablero
        assert aplicar_reordenamiento(snapshot, ids["A"], ids["T2"], 1) is snapshot


class TestAplicarMovimiento:
    def test_mueve_con_referencia_de_columna_actualizada(self, tablero):
        snapshot, ids = tablero

        nuevo = aplicar_movimiento(snapshot, ids["A"], ids["B"], ids["T1"], 0)

        assert titulos(nuevo, ids["A"]) == ["T2", "T3"]
        assert titulos(nuevo, ids["B"]) == ["T1", "T4"]
        movida = nuevo.columna(ids["B"]).tareas[0]
        assert movida.columna_id == ids["B"]
        assert [t.posicion for t in nuevo.columna(ids["A"]).tareas] == [0, 1]
        assert [t.posicion for t in nuevo.columna(ids["B"]).tareas] == [0, 1]

    def test_a_columna_vacia(self, tablero):
        snapshot, ids = tablero

        nuevo = aplicar_movimiento(snapshot, ids["A"], ids["C"], ids["T2"], 0)

        assert titulos(nuevo, ids["C"]) == ["T2"]

    def test_indice_mayor_se_acota_al_final(self, tablero):
        snapshot, ids = tablero

        nuevo = aplicar_movimiento(snapshot, ids["A"], ids["B"], ids["T3"], 99)

        assert titulos(nuevo, ids["B"]) == ["T4", "T3"]

    def test_tarea_fuera_del_origen_devuelve_el_mismo_snapshot(self, tablero):
        snapshot, ids = tablero
        assert aplicar_movimiento(snapshot, ids["B"], ids["C"], ids["T1"], 0) is snapshot
        assert aplicar_movimiento(snapshot, ids["A"], uuid4(), ids["T1"], 0) is snapshot

    def test_misma_columna_equivale_a_reordenar(self, tablero):
        snapshot, ids = tablero

        nuevo = aplicar_movimiento(snapshot, ids["A"], ids["A"], ids["T3"], 0)

        assert titulos(nuevo, ids["A"]) == ["T3", "T1", "T2"]


def test_aplicar_intencion_despacha_por_tipo(tablero):
    snapshot, ids = tablero

    reordenado = aplicar_intencion(snapshot, ReordenarEnColumna(ids["T3"], ids["A"], 0))
    movido = aplicar_intencion(snapshot, MoverEntreColumnas(ids["T4"], ids["B"], ids["C"], 0))

    assert titulos(reordenado, ids["A"]) == ["T3", "T1", "T2"]
    assert titulos(movido, ids["C"]) == ["T4"]
    with pytest.raises(TypeError):
        aplicar_intencion(snapshot, object())


def test_filtrar_tareas(tablero):
    snapshot, ids = tablero

    assert filtrar_tareas(snapshot, "  ") is snapshot
    filtrado = filtrar_tareas(snapshot, "t1")
    assert titulos(filtrado, ids["A"]) == ["T1"]
    assert titulos(filtrado, ids["B"]) == []


class TestProyeccionOptimista:
    def test_especular_cambia_lo_visible_pero_no_lo_confirmado(self, tablero):
        snapshot, ids = tablero
        proyeccion = ProyeccionOptimista(snapshot)

        proyeccion.especular(ReordenarEnColumna(ids["T1"], ids["A"], 2))

        assert titulos(proyeccion.visible, ids["A"]) == ["T2", "T3", "T1"]
        assert proyeccion.confirmado is snapshot
        assert proyeccion.pendientes == 1

    def test_revertir_vuelve_al_ultimo_confirmado(self, tablero):
        snapshot, ids = tablero
        proyeccion = ProyeccionOptimista(snapshot)
        ticket = proyeccion.especular(MoverEntreColumnas(ids["T1"], ids["A"], ids["B"], 1))

        proyeccion.revertir(ticket)

        assert proyeccion.visible == snapshot
        assert proyeccion.pendientes == 0
        assert proyeccion.version == 0

    def test_revertir_una_intencion_conserva_las_demas(self, tablero):
        snapshot, ids = tablero
        proyeccion = ProyeccionOptimista(snapshot)
        fallida = proyeccion.especular(ReordenarEnColumna(ids["T1"], ids["A"], 2))
        proyeccion.especular(MoverEntreColumnas(ids["T4"], ids["B"], ids["C"], 0))

        proyeccion.revertir(fallida)

        assert titulos(proyeccion.visible, ids["A"]) == ["T1", "T2", "T3"]
        assert titulos(proyeccion.visible, ids["C"]) == ["T4"]

    def test_confirmar_adopta_el_snapshot_del_servidor(self, tablero):
        snapshot, ids = tablero
        proyeccion = ProyeccionOptimista(snapshot)
        intencion = ReordenarEnColumna(ids["T1"], ids["A"], 2)
        ticket = proyeccion.especular(intencion)
        servidor = aplicar_intencion(snapshot, intencion)

        aceptado = proyeccion.confirmar(ticket, servidor, proyeccion.marca_lectura())

        assert aceptado
        assert proyeccion.version == 1
        assert proyeccion.pendientes == 0
        assert titulos(proyeccion.confirmado, ids["A"]) == ["T2", "T3", "T1"]
        assert proyeccion.visible == proyeccion.confirmado

    def test_una_lectura_vieja_no_pisa_una_nueva(self, tablero):
        snapshot, ids = tablero
        proyeccion = ProyeccionOptimista(snapshot)
        primero = ReordenarEnColumna(ids["T1"], ids["A"], 2)
        segundo = MoverEntreColumnas(ids["T4"], ids["B"], ids["C"], 0)
        t1, t2 = proyeccion.especular(primero), proyeccion.especular(segundo)
        marca_vieja, marca_nueva = proyeccion.marca_lectura(), proyeccion.marca_lectura()
        viejo = aplicar_intencion(snapshot, primero)
        nuevo = aplicar_intencion(viejo, segundo)

        assert proyeccion.confirmar(t2, nuevo, marca_nueva)
        assert not proyeccion.confirmar(t1, viejo, marca_vieja)

        assert proyeccion.version == 1
        assert titulos(proyeccion.visible, ids["C"]) == ["T4"]
        assert titulos(proyeccion.visible, ids["A"]) == ["T2", "T3", "T1"]

    def test_confirmar_sin_snapshot_consolida_la_intencion(self, tablero):
        snapshot, ids = tablero
        proyeccion = ProyeccionOptimista(snapshot)
        ticket = proyeccion.especular(MoverEntreColumnas(ids["T1"], ids["A"], ids["C"], 0))

        assert proyeccion.confirmar(ticket)

        assert proyeccion.version == 1
        assert titulos(proyeccion.confirmado, ids["C"]) == ["T1"]

    def test_reemplazar_conserva_las_pendientes(self, tablero):
        snapshot, ids = tablero
        proyeccion = ProyeccionOptimista(snapshot)
        proyeccion.especular(ReordenarEnColumna(ids["T3"], ids["A"], 0))

        proyeccion.reemplazar(snapshot)

        assert proyeccion.version == 1
        assert titulos(proyeccion.visible, ids["A"]) == ["T3", "T1", "T2"]
