"""Row-level security policies and raw SQL helpers."""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

# Session setting carrying the credential presented by an anonymous caller.
DOSE_CREDENTIAL_SETTING = "petclaim.dose_credential"

PUBLIC_DOSE_POLICY_SQL = f"""
ALTER TABLE medication_doses ENABLE ROW LEVEL SECURITY;

DROP POLICY IF EXISTS "anon read dose by credential" ON medication_doses;
CREATE POLICY "anon read dose by credential" ON medication_doses
  FOR SELECT TO anon
  USING (
    one_time_token = current_setting('{DOSE_CREDENTIAL_SETTING}', true)
    OR short_code = current_setting('{DOSE_CREDENTIAL_SETTING}', true)
  );

DROP POLICY IF EXISTS "anon confirm dose by credential" ON medication_doses;
CREATE POLICY "anon confirm dose by credential" ON medication_doses
  FOR UPDATE TO anon
  USING (
    status = 'pending'
    AND (
      one_time_token = current_setting('{DOSE_CREDENTIAL_SETTING}', true)
      OR short_code = current_setting('{DOSE_CREDENTIAL_SETTING}', true)
    )
  )
  WITH CHECK (status = 'confirmed');

DROP POLICY IF EXISTS "anon read medication behind dose" ON medications;
CREATE POLICY "anon read medication behind dose" ON medications
  FOR SELECT TO anon
  USING (
    EXISTS (
      SELECT 1 FROM medication_doses d
      WHERE d.medication_id = medications.id
        AND (
          d.one_time_token = current_setting('{DOSE_CREDENTIAL_SETTING}', true)
          OR d.short_code = current_setting('{DOSE_CREDENTIAL_SETTING}', true)
        )
    )
  );

DROP POLICY IF EXISTS "anon read pet behind dose" ON pets;
CREATE POLICY "anon read pet behind dose" ON pets
  FOR SELECT TO anon
  USING (
    EXISTS (
      SELECT 1 FROM medications m
      JOIN medication_doses d ON d.medication_id = m.id
      WHERE m.pet_id = pets.id
        AND (
          d.one_time_token = current_setting('{DOSE_CREDENTIAL_SETTING}', true)
          OR d.short_code = current_setting('{DOSE_CREDENTIAL_SETTING}', true)
        )
    )
  );
""".strip()


async def bind_dose_credential(session: AsyncSession, value: str) -> None:
    """Expose ``value`` to the RLS policies for the current transaction."""

    if session.get_bind().dialect.name != "postgresql":
        return
    await session.execute(
        text("SELECT set_config(:name, :value, true)"),
        {"name": DOSE_CREDENTIAL_SETTING, "value": value},
    )


def split_sql_statements(sql: str) -> list[str]:
    """Split a SQL script on top-level semicolons.

    Semicolons inside quoted strings, quoted identifiers, dollar-quoted
    bodies and ``--`` comments do not end a statement.
    """

    statements: list[str] = []
    buf: list[str] = []
    i = 0
    quote: str | None = None
    dollar_tag: str | None = None
    length = len(sql)
    while i < length:
        ch = sql[i]
        if dollar_tag is not None:
            if sql.startswith(dollar_tag, i):
                buf.append(dollar_tag)
                i += len(dollar_tag)
                dollar_tag = None
                continue
            buf.append(ch)
        elif quote is not None:
            buf.append(ch)
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
            buf.append(ch)
        elif ch == "-" and sql.startswith("--", i):
            end = sql.find("\n", i)
            i = length if end == -1 else end
            continue
        elif ch == "$":
            end = sql.find("$", i + 1)
            tag = sql[i : end + 1] if end != -1 else ""
            if tag and (tag == "$$" or tag[1:-1].isidentifier()):
                dollar_tag = tag
                buf.append(tag)
                i = end + 1
                continue
            buf.append(ch)
        elif ch == ";":
            statement = "".join(buf).strip()
            if statement:
                statements.append(statement)
            buf = []
        else:
            buf.append(ch)
        i += 1
    tail = "".join(buf).strip()
    if tail:
        statements.append(tail)
    return statements
