import importlib
from pathlib import Path
from config.database import engine, SessionLocal, Base

ROOT = Path(__file__).parent.parent

# Dictionary to store loaded models, keyed by table name
models = {}


# Import every `*_model.py` under `api/` by its dotted name so each mapped
# class is registered on Base.metadata exactly once.
def scan_models(directory: Path):
    for item in sorted(directory.rglob("*_model.py")):
        module_name = ".".join(item.relative_to(ROOT).with_suffix("").parts)
        module = importlib.import_module(module_name)

        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if hasattr(attr, "__tablename__"):
                models[attr.__tablename__] = attr


scan_models(ROOT / "api")


def init_db():
    Base.metadata.create_all(bind=engine)


__all__ = ["engine", "SessionLocal", "Base", "models", "init_db"]
