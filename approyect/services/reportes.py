"""Reportes descargables del monitoreo de asistencias (CSV y PDF)."""
import csv
import io
from collections import Counter
from typing import Iterator, List

from reportlab.graphics.charts.barcharts import VerticalBarChart
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from approyect.services.transiciones import ABIERTO, CERRADO, REVISION, canonico

COLUMNAS = ["ID", "Asistencia", "Periodo", "Responsable", "Estado"]

# El PDF se limita para que siga siendo legible
LIMITE_FILAS_PDF = 1000


def _fila(asistencia: dict) -> list:
    return [
        asistencia.get("id"),
        asistencia.get("asistencia") or "",
        asistencia.get("periodo") or "",
        asistencia.get("responsable") or "",
        asistencia.get("estado") or "",
    ]


def iter_csv(asistencias: List[dict]) -> Iterator[str]:
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(COLUMNAS)
    yield output.getvalue()
    output.seek(0); output.truncate(0)

    for asistencia in asistencias:
        writer.writerow(_fila(asistencia))
        yield output.getvalue()
        output.seek(0); output.truncate(0)


def generar_pdf(asistencias: List[dict]) -> io.BytesIO:
    filas = asistencias[:LIMITE_FILAS_PDF]

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(letter))
    elements = []
    styles = getSampleStyleSheet()

    elements.append(Paragraph("Monitoreo de Asistencias", styles['Title']))
    elements.append(Spacer(1, 20))

    # Gráfica por estado
    conteo = Counter(canonico(a.get("estado"), REVISION) for a in filas)
    data = [(conteo[REVISION], conteo[ABIERTO], conteo[CERRADO])]
    drawing = Drawing(400, 150)
    bc = VerticalBarChart()
    bc.x = 50; bc.y = 20; bc.height = 100; bc.width = 300
    bc.data = data
    bc.strokeColor = colors.black
    bc.valueAxis.valueMin = 0
    bc.valueAxis.valueMax = max(max(data[0]), 5) + 2
    bc.categoryAxis.categoryNames = [REVISION, ABIERTO, CERRADO]
    drawing.add(bc)
    elements.append(drawing)
    elements.append(Spacer(1, 20))

    # Tabla
    table_rows = [COLUMNAS[1:]]
    for a in filas:
        titulo = a.get("asistencia") or ""
        titulo_corto = (titulo[:30] + '..') if len(titulo) > 30 else titulo
        table_rows.append([titulo_corto] + [str(v) for v in _fila(a)[2:]])

    t = Table(table_rows)
    t.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('GRID', (0, 0), (-1, -1), 1, colors.black),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
    ]))
    elements.append(t)

    if len(asistencias) > LIMITE_FILAS_PDF:
        elements.append(Spacer(1, 10))
        elements.append(Paragraph(
            f"(Reporte limitado a las primeras {LIMITE_FILAS_PDF} asistencias)", styles['Italic']
        ))

    doc.build(elements)
    buffer.seek(0)
    return buffer
