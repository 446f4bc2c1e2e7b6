"""
Escenarios comunes a todas las implementaciones de TableroRepository.

Cada suite concreta hereda de `EscenariosRepositorio` y de
`unittest.TestCase`, y define `self.repo` y `MODULO_REPOSITORIO`
(ruta del módulo donde parchear `plan_de_escritura`).
"""

import random
import threading
from unittest.mock import patch
from uuid import UUID, uuid4

from core.application.crear_tablero import CrearTableroCommand, CrearTableroUseCase
from core.domain.errors import ArgumentoInvalido, FalloTransaccion, KanbanError, NoEncontrado
from core.domain.ordenamiento import Asignacion, plan_de_escritura


class EscenariosRepositorio:
    MODULO_REPOSITORIO = ""

    # ── Auxiliares ────────────────────────────────────────────────────────────

    def _crear_tablero(self, titulo: str = "Proyecto"):
        tablero = CrearTableroUseCase(self.repo).execute(CrearTableroCommand(titulo=titulo))
        snapshot = self.repo.get_tablero_completo(tablero.id)
        return tablero, [c.id for c in snapshot.columnas]

    def _columna_con(self, columna_id: UUID, *titulos: str) -> dict[str, UUID]:
        return {t: self.repo.agregar_tarea(columna_id, t).id for t in titulos}

    def _tareas(self, columna_id: UUID):
        columna = self.repo.get_columna(columna_id)
        snapshot = self.repo.get_tablero_completo(columna.tablero_id)
        return snapshot.columna(columna_id).tareas

    def _titulos(self, columna_id: UUID) -> list[str]:
        return [t.titulo for t in self._tareas(columna_id)]

    def _posiciones(self, columna_id: UUID) -> list[int]:
        return [t.posicion for t in self._tareas(columna_id)]

    def _assert_densa(self, columna_id: UUID) -> None:
        posiciones = self._posiciones(columna_id)
        self.assertEqual(posiciones, list(range(len(posiciones))))

    # ── Altas ─────────────────────────────────────────────────────────────────

    def test_crear_tablero_con_tres_columnas_iniciales(self) -> None:
        tablero, _ = self._crear_tablero()

        snapshot = self.repo.get_tablero_completo(tablero.id)

        self.assertEqual(
            [c.columna.titulo for c in snapshot.columnas],
            ["To Do", "In Progress", "Done"],
        )
        self.assertEqual([c.columna.posicion for c in snapshot.columnas], [0, 1, 2])
        self.assertEqual(self.repo.get_tablero(tablero.id).titulo, "Proyecto")

    def test_agregar_columna_queda_al_final(self) -> None:
        tablero, _ = self._crear_tablero()

        columna = self.repo.agregar_columna(tablero.id, "Bloqueado", "#000000")

        snapshot = self.repo.get_tablero_completo(tablero.id)
        self.assertEqual(columna.posicion, 3)
        self.assertEqual([c.columna.posicion for c in snapshot.columnas], [0, 1, 2, 3])

    def test_agregar_columna_a_tablero_inexistente(self) -> None:
        with self.assertRaises(NoEncontrado):
            self.repo.agregar_columna(uuid4(), "X", "#fff")

    def test_primera_tarea_de_columna_vacia_tiene_posicion_cero(self) -> None:
        _, (todo, _, _) = self._crear_tablero()

        tarea = self.repo.agregar_tarea(todo, "Primera")

        self.assertEqual(tarea.posicion, 0)
        self.assertEqual(self.repo.get_tarea(tarea.id).columna_id, todo)

    def test_tareas_se_agregan_al_final(self) -> None:
        _, (todo, _, _) = self._crear_tablero()

        self._columna_con(todo, "T1", "T2", "T3")

        self.assertEqual(self._titulos(todo), ["T1", "T2", "T3"])
        self._assert_densa(todo)

    def test_agregar_tarea_a_columna_inexistente(self) -> None:
        with self.assertRaises(NoEncontrado):
            self.repo.agregar_tarea(uuid4(), "Huérfana")

    def test_lecturas_de_inexistentes(self) -> None:
        self.assertIsNone(self.repo.get_tablero(uuid4()))
        self.assertIsNone(self.repo.get_tablero_completo(uuid4()))
        self.assertIsNone(self.repo.get_columna(uuid4()))
        self.assertIsNone(self.repo.get_tarea(uuid4()))

    def test_list_tableros(self) -> None:
        self._crear_tablero("Uno")
        self._crear_tablero("Dos")

        self.assertEqual(
            sorted(t.titulo for t in self.repo.list_tableros()), ["Dos", "Uno"]
        )

    # ── Reordenar ─────────────────────────────────────────────────────────────

    def test_reordenar_primera_al_final(self) -> None:
        _, (a, _, _) = self._crear_tablero()
        ids = self._columna_con(a, "T1", "T2", "T3")

        self.repo.reordenar_tarea(ids["T1"], 2, a)

        self.assertEqual(self._titulos(a), ["T2", "T3", "T1"])
        self.assertEqual(self._posiciones(a), [0, 1, 2])

    def test_reordenar_intercambia_dos_tareas(self) -> None:
        _, (a, _, _) = self._crear_tablero()
        ids = self._columna_con(a, "T1", "T2")

        self.repo.reordenar_tarea(ids["T2"], 0, a)

        self.assertEqual(self._titulos(a), ["T2", "T1"])
        self._assert_densa(a)

    def test_reordenar_ida_y_vuelta_restaura_el_orden(self) -> None:
        _, (a, _, _) = self._crear_tablero()
        ids = self._columna_con(a, "T1", "T2", "T3", "T4", "T5")

        self.repo.reordenar_tarea(ids["T2"], 4, a)
        self.repo.reordenar_tarea(ids["T2"], 1, a)

        self.assertEqual(self._titulos(a), ["T1", "T2", "T3", "T4", "T5"])
        self._assert_densa(a)

    def test_reordenar_al_mismo_indice_no_cambia_nada(self) -> None:
        _, (a, _, _) = self._crear_tablero()
        ids = self._columna_con(a, "T1", "T2")

        self.repo.reordenar_tarea(ids["T1"], 0, a)

        self.assertEqual(self._titulos(a), ["T1", "T2"])

    def test_reordenar_fuera_de_rango_no_modifica(self) -> None:
        _, (a, _, _) = self._crear_tablero()
        ids = self._columna_con(a, "T1", "T2", "T3")

        for indice in (3, -1):
            with self.assertRaises(ArgumentoInvalido):
                self.repo.reordenar_tarea(ids["T1"], indice, a)

        self.assertEqual(self._titulos(a), ["T1", "T2", "T3"])
        self._assert_densa(a)

    def test_reordenar_tarea_o_columna_inexistente(self) -> None:
        _, (a, b, _) = self._crear_tablero()
        ids = self._columna_con(a, "T1")

        with self.assertRaises(NoEncontrado):
            self.repo.reordenar_tarea(uuid4(), 0, a)
        with self.assertRaises(NoEncontrado):
            self.repo.reordenar_tarea(ids["T1"], 0, uuid4())
        with self.assertRaises(NoEncontrado):
            self.repo.reordenar_tarea(ids["T1"], 0, b)

    # ── Mover ─────────────────────────────────────────────────────────────────

    def test_mover_entre_columnas(self) -> None:
        _, (a, b, _) = self._crear_tablero()
        ids = self._columna_con(a, "T1", "T2")
        self._columna_con(b, "T3")

        self.repo.mover_tarea(ids["T1"], a, b, 0)

        self.assertEqual(self._titulos(a), ["T2"])
        self.assertEqual(self._posiciones(a), [0])
        self.assertEqual(self._titulos(b), ["T1", "T3"])
        self.assertEqual(self._posiciones(b), [0, 1])
        self.assertEqual(self.repo.get_tarea(ids["T1"]).columna_id, b)

    def test_mover_con_indice_igual_al_total_queda_ultima(self) -> None:
        _, (a, b, _) = self._crear_tablero()
        ids = self._columna_con(a, "T1")
        self._columna_con(b, "T2", "T3")

        self.repo.mover_tarea(ids["T1"], a, b, 2)

        self.assertEqual(self._titulos(b), ["T2", "T3", "T1"])
        self.assertEqual(self._titulos(a), [])
        self._assert_densa(b)

    def test_mover_a_columna_vacia(self) -> None:
        _, (a, _, c) = self._crear_tablero()
        ids = self._columna_con(a, "T1", "T2", "T3")

        self.repo.mover_tarea(ids["T2"], a, c, 0)

        self.assertEqual(self._titulos(a), ["T1", "T3"])
        self.assertEqual(self._titulos(c), ["T2"])
        self._assert_densa(a)
        self._assert_densa(c)

    def test_mover_con_indice_mayor_falla_sin_cambios(self) -> None:
        _, (a, b, _) = self._crear_tablero()
        ids = self._columna_con(a, "T1", "T2")
        self._columna_con(b, "T3")

        with self.assertRaises(ArgumentoInvalido):
            self.repo.mover_tarea(ids["T1"], a, b, 2)

        self.assertEqual(self._titulos(a), ["T1", "T2"])
        self.assertEqual(self._titulos(b), ["T3"])
        self.assertEqual(self.repo.get_tarea(ids["T1"]).columna_id, a)

    def test_mover_a_la_misma_columna_y_mismo_indice_es_noop(self) -> None:
        _, (a, _, _) = self._crear_tablero()
        ids = self._columna_con(a, "T1", "T2", "T3")

        self.repo.mover_tarea(ids["T2"], a, a, 1)

        self.assertEqual(self._titulos(a), ["T1", "T2", "T3"])
        self.assertEqual(self._posiciones(a), [0, 1, 2])

    def test_mover_a_la_misma_columna_con_indice_total_queda_ultima(self) -> None:
        _, (a, _, _) = self._crear_tablero()
        ids = self._columna_con(a, "T1", "T2", "T3")

        self.repo.mover_tarea(ids["T1"], a, a, 3)

        self.assertEqual(self._titulos(a), ["T2", "T3", "T1"])
        with self.assertRaises(ArgumentoInvalido):
            self.repo.mover_tarea(ids["T1"], a, a, 4)

    def test_mover_tarea_que_no_esta_en_origen(self) -> None:
        _, (a, b, c) = self._crear_tablero()
        ids = self._columna_con(a, "T1")

        with self.assertRaises(NoEncontrado):
            self.repo.mover_tarea(ids["T1"], b, c, 0)
        with self.assertRaises(NoEncontrado):
            self.repo.mover_tarea(ids["T1"], a, uuid4(), 0)
        self.assertEqual(self._titulos(a), ["T1"])

    def test_mover_entre_tableros_distintos(self) -> None:
        _, (a, _, _) = self._crear_tablero("Uno")
        _, (otra, _, _) = self._crear_tablero("Dos")
        ids = self._columna_con(a, "T1")

        with self.assertRaises(ArgumentoInvalido):
            self.repo.mover_tarea(ids["T1"], a, otra, 0)

    # ── Atomicidad e invariantes ──────────────────────────────────────────────

    def test_fallo_entre_fases_revierte_todo(self) -> None:
        _, (a, b, _) = self._crear_tablero()
        ids = self._columna_con(a, "T1", "T2", "T3")
        self._columna_con(b, "T4")

        def plan_que_choca(actuales, finales):
            temporal, final = plan_de_escritura(actuales, finales)
            # Todas las filas a la misma posición: la restricción única salta en la fase 2.
            return temporal, [Asignacion(x.tarea_id, x.columna_id, 0) for x in final]

        with patch(f"{self.MODULO_REPOSITORIO}.plan_de_escritura", side_effect=plan_que_choca):
            with self.assertRaises(FalloTransaccion):
                self.repo.mover_tarea(ids["T3"], a, b, 0)

        self.assertEqual(self._titulos(a), ["T1", "T2", "T3"])
        self.assertEqual(self._posiciones(a), [0, 1, 2])
        self.assertEqual(self._titulos(b), ["T4"])
        self.assertEqual(self.repo.get_tarea(ids["T3"]).columna_id, a)

    def test_secuencia_aleatoria_mantiene_posiciones_densas(self) -> None:
        tablero, columnas = self._crear_tablero()
        for i, columna_id in enumerate(columnas):
            self._columna_con(columna_id, *(f"C{i}T{j}" for j in range(3)))
        rng = random.Random(20240601)

        for _ in range(40):
            snapshot = self.repo.get_tablero_completo(tablero.id)
            origen = rng.choice([c for c in snapshot.columnas if c.tareas])
            tarea = rng.choice(origen.tareas)
            destino = rng.choice(snapshot.columnas)
            if destino.id == origen.id:
                self.repo.reordenar_tarea(
                    tarea.id, rng.randrange(len(origen.tareas)), origen.id
                )
            else:
                self.repo.mover_tarea(
                    tarea.id, origen.id, destino.id, rng.randrange(len(destino.tareas) + 1)
                )

            snapshot = self.repo.get_tablero_completo(tablero.id)
            self.assertEqual(sum(len(c.tareas) for c in snapshot.columnas), 9)
            for columna in snapshot.columnas:
                self.assertEqual(
                    [t.posicion for t in columna.tareas], list(range(len(columna.tareas)))
                )
                self.assertTrue(all(t.columna_id == columna.id for t in columna.tareas))


class EscenariosConcurrencia:
    """
    Varios hilos reordenan y mueven tareas del mismo tablero a la vez.

    Las suites concretas definen `self.repo` sobre una base en archivo: cada
    hilo necesita su propia conexión para que los locks de escritura cuenten.
    """

    HILOS = 6
    OPERACIONES_POR_HILO = 25
    TAREAS_POR_COLUMNA = 5

    def _trabajar(self, semilla, tareas, columnas, barrera, inesperados) -> None:
        azar = random.Random(semilla)
        barrera.wait()
        for _ in range(self.OPERACIONES_POR_HILO):
            tarea_id = azar.choice(tareas)
            try:
                tarea = self.repo.get_tarea(tarea_id)
                if azar.random() < 0.5:
                    self.repo.reordenar_tarea(
                        tarea_id, azar.randrange(self.TAREAS_POR_COLUMNA), tarea.columna_id
                    )
                else:
                    destino = azar.choice([c for c in columnas if c != tarea.columna_id])
                    self.repo.mover_tarea(
                        tarea_id,
                        tarea.columna_id,
                        destino,
                        azar.randrange(self.TAREAS_POR_COLUMNA + 1),
                    )
            except KanbanError:
                # Lecturas que otro hilo dejó viejas: índice o columna ya no válidos.
                continue
            except Exception as e:
                inesperados.append(e)

    def test_escrituras_concurrentes_mantienen_posiciones_densas(self) -> None:
        tablero, columnas = self._crear_tablero_concurrente()
        tareas = [
            tarea_id
            for i, columna_id in enumerate(columnas)
            for tarea_id in self._columna_con(
                columna_id, *(f"C{i}-T{n}" for n in range(self.TAREAS_POR_COLUMNA))
            ).values()
        ]
        barrera = threading.Barrier(self.HILOS)
        inesperados: list[Exception] = []
        hilos = [
            threading.Thread(
                target=self._trabajar,
                args=(semilla, tareas, columnas, barrera, inesperados),
            )
            for semilla in range(self.HILOS)
        ]
        for hilo in hilos:
            hilo.start()
        for hilo in hilos:
            hilo.join(timeout=120)

        self.assertFalse(any(hilo.is_alive() for hilo in hilos))
        self.assertEqual(inesperados, [])
        snapshot = self.repo.get_tablero_completo(tablero.id)
        for columna in snapshot.columnas:
            self.assertEqual(
                [t.posicion for t in columna.tareas], list(range(len(columna.tareas)))
            )
            self.assertTrue(all(t.columna_id == columna.id for t in columna.tareas))
        finales = [t.id for c in snapshot.columnas for t in c.tareas]
        self.assertEqual(len(finales), len(tareas))
        self.assertEqual(set(finales), set(tareas))

    def _crear_tablero_concurrente(self):
        tablero = CrearTableroUseCase(self.repo).execute(CrearTableroCommand(titulo="Carrera"))
        snapshot = self.repo.get_tablero_completo(tablero.id)
        return tablero, [c.id for c in snapshot.columnas]

    def _columna_con(self, columna_id: UUID, *titulos: str) -> dict[str, UUID]:
        return {t: self.repo.agregar_tarea(columna_id, t).id for t in titulos}
