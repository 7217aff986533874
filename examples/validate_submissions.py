#!/usr/bin/env python3
"""
Example script: build a form, save it, and validate a batch of submissions.

Reads FORMSMITH_* settings from the environment (or a .env file), saves the
schema to the configured store and validates a small DataFrame of answers.
"""

import asyncio

import pandas as pd
from dotenv import load_dotenv

from formsmith import FormBuilder, FormConfig, FormSession, FormValidator, create_store
from formsmith.schemas.edits import SetDerived, SetParents, SetValidationKey
from formsmith.utils.logger import setup_logging

# Load environment variables
load_dotenv()


def build_form() -> FormBuilder:
    builder = FormBuilder()

    name = builder.add_field("text")
    builder.update_field(name.id, "label", "Name")
    builder.update_field(name.id, "required", True)

    email = builder.add_field("text")
    builder.update_field(email.id, "label", "Email")
    builder.apply(SetValidationKey(email.id, "email", True))

    age = builder.add_field("number")
    builder.update_field(age.id, "label", "Age")
    builder.apply(SetValidationKey(age.id, "minNumber", 0))
    builder.apply(SetValidationKey(age.id, "maxNumber", 120))

    years_left = builder.add_field("number")
    builder.update_field(years_left.id, "label", "Years Left")
    builder.apply(SetDerived(years_left.id, True))
    builder.apply(SetParents(years_left.id, (age.id,)))
    builder.update_field(years_left.id, "formula", "Years Left = 65 - Age")

    return builder


async def main():
    config = FormConfig.from_env()
    setup_logging(level=config.log_level, format_type="console", include_timestamp=False)

    builder = build_form()

    async with create_store(config) as store:
        schema = await builder.save(store, "Retirement survey")
        print(f"Saved '{schema.name}' ({len(schema.fields)} fields)")

    # Single respondent
    session = FormSession(schema, FormValidator(config))
    session.set_value(schema.fields[0].id, "Ann")
    session.set_value(schema.fields[2].id, "30")
    result = session.submit()
    print("Submitted:", result.ok, result.values)

    # Batch of respondents
    ids = [f.id for f in schema.fields]
    df = pd.DataFrame([
        {ids[0]: "Ann", ids[1]: "ann@example.com", ids[2]: 30},
        {ids[0]: "", ids[1]: "not-an-email", ids[2]: 45},
    ])
    batch = FormValidator(config).validate_many(schema, df)
    print(batch.data)
    print(f"Success rate: {batch.success_rate:.0%}")


if __name__ == "__main__":
    asyncio.run(main())
