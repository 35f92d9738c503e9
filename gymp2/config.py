# gymp2/config.py
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class StoreConfig:
    """Configuração do armazenamento duplo (Supabase/Postgres + arquivos JSON).

    `enabled` é calculado na criação (URL e chave presentes) e pode ser
    desligado em tempo de execução quando o teste de conexão falha.
    """

    data_dir: Path = Path("data")
    remote_url: Optional[str] = None
    remote_key: Optional[str] = None
    await_writes: bool = False
    enabled: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)
        self.enabled = bool(self.remote_url and self.remote_key)

    @classmethod
    def from_env(cls) -> "StoreConfig":
        return cls(
            data_dir=Path(os.getenv("GYMP2_DATA_DIR", "data")),
            # Ex.: postgresql+psycopg2://postgres@db.<projeto>.supabase.co:5432/postgres
            remote_url=os.getenv("SUPABASE_DB_URL") or None,
            remote_key=os.getenv("SUPABASE_SERVICE_KEY") or None,
            await_writes=_flag("GYMP2_AWAIT_WRITES"),
        )

    def describe(self) -> str:
        return "supabase" if self.enabled else "arquivos"


APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
