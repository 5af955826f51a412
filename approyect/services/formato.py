from datetime import date, datetime, timezone


def formatear_fecha(fecha_iso: str) -> str:
    """'YYYY-MM-DD' -> 'DD/MM/YYYY'. Si no tiene ese formato se devuelve tal cual."""
    if not fecha_iso:
        return ""
    partes = str(fecha_iso).split("T")[0].split("-")
    if len(partes) != 3:
        return str(fecha_iso)
    anio, mes, dia = partes
    return f"{dia}/{mes}/{anio}"


def fecha_hoy() -> str:
    return date.today().strftime("%d/%m/%Y")


def marca_tiempo() -> str:
    return datetime.now(timezone.utc).isoformat()


def formatear_horas(total_horas) -> str:
    return f"{total_horas or '0'} horas mínimas a la semana"


def a_entero(valor, por_defecto: int = 0) -> int:
    try:
        return int(float(valor))
    except (TypeError, ValueError, OverflowError):
        return por_defecto
