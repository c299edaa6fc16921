from sqlalchemy.orm import Session

SUPPORTED_DIALECTS = ("sqlite", "postgresql", "mysql", "mariadb")


class UnsupportedDialectError(RuntimeError):
    pass


def check_dialect(engine) -> None:
    """ 시작 시점에 upsert를 지원하는 DB인지 확인 """
    name = engine.dialect.name
    if name not in SUPPORTED_DIALECTS:
        raise UnsupportedDialectError(
            f"Unsupported database dialect: {name} (supported: {', '.join(SUPPORTED_DIALECTS)})"
        )


def upsert(db: Session, model, values: dict, conflict_columns: list[str], update_columns: list[str]):
    """
    (conflict_columns) 유니크 제약 기준으로 INSERT 하거나, 이미 있으면 update_columns만 갱신합니다.
    SELECT 후 INSERT/UPDATE 하는 방식과 달리 한 문장으로 처리되므로 동시 요청에도 중복 행이 생기지 않습니다.
    """
    dialect = db.get_bind().dialect.name

    if dialect in ("sqlite", "postgresql"):
        if dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            from sqlalchemy.dialects.postgresql import insert
        stmt = insert(model).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=conflict_columns,
            set_={col: stmt.excluded[col] for col in update_columns},
        )
    elif dialect in ("mysql", "mariadb"):
        from sqlalchemy.dialects.mysql import insert
        stmt = insert(model).values(**values)
        stmt = stmt.on_duplicate_key_update(
            **{col: stmt.inserted[col] for col in update_columns}
        )
    else:
        raise UnsupportedDialectError(f"Unsupported database dialect: {dialect}")

    db.execute(stmt)
