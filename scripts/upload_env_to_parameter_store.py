#!/usr/bin/env python3
"""
Upload environment variables to AWS Parameter Store.

This script reads table names and Cognito settings from a .env file and
uploads them to AWS Parameter Store under the expense tracker prefix.

Run from the repository root:

    python -m scripts.upload_env_to_parameter_store --dry-run
"""

import os
import sys
from pathlib import Path

import boto3
import click
from botocore.exceptions import ClientError
from dotenv import dotenv_values

from services.parameter_store import DEFAULT_PREFIX

# parameter key under the prefix -> .env variable
PARAMETER_SOURCES = {
    "tables/expenses": "TABLE_NAME",
    "tables/expenses-month-index": "GSI1_NAME",
    "tables/users": "USERS_TABLE_NAME",
    "tables/users-email-index": "USERS_EMAIL_INDEX_NAME",
    "cognito/user-pool-id": "COGNITO_USER_POOL_ID",
    "cognito/app-client-id": "COGNITO_APP_CLIENT_ID",
}


def load_env_file(env_file_path: str = ".env") -> dict:
    """
    Load configuration values from a .env file.

    Args:
        env_file_path: Path to .env file

    Returns:
        Dictionary of parameter keys to values, for the variables that are set
    """
    if not Path(env_file_path).exists():
        click.secho(f"Error: {env_file_path} file not found", fg="red", err=True)
        sys.exit(1)

    values = dotenv_values(env_file_path)

    parameters = {
        key: values.get(env_var) or os.getenv(env_var)
        for key, env_var in PARAMETER_SOURCES.items()
    }
    parameters = {k: v for k, v in parameters.items() if v}

    if not parameters:
        click.secho("Warning: No expense tracker settings found in .env file", fg="yellow")
        click.echo(f"Expected variables: {', '.join(PARAMETER_SOURCES.values())}")

    return parameters


def upload_parameters(
    parameters: dict, parameter_prefix: str = DEFAULT_PREFIX, dry_run: bool = False
) -> int:
    """
    Upload parameters to AWS Parameter Store.

    Args:
        parameters: Dictionary of parameter keys to values
        parameter_prefix: Prefix for parameter names
        dry_run: If True, only print what would be uploaded

    Returns:
        Number of parameters that failed to upload
    """
    if not parameters:
        click.secho("No parameters to upload", fg="yellow")
        return 0

    if dry_run:
        click.secho("DRY RUN - Would upload the following parameters:", fg="blue")
        for param_name, value in parameters.items():
            click.echo(f"  {parameter_prefix}/{param_name} = {value}")
        return 0

    ssm = boto3.client("ssm")
    failures = 0

    for param_name, value in parameters.items():
        full_name = f"{parameter_prefix}/{param_name}"

        try:
            response = ssm.put_parameter(
                Name=full_name,
                Value=value,
                Type="String",
                Description=f"Expense tracker setting: {param_name}",
                Overwrite=True,
            )
            click.secho(
                f"Uploaded {full_name} (version {response['Version']})", fg="green"
            )
        except ClientError as e:
            failures += 1
            click.secho(f"Failed to upload {full_name}: {e}", fg="red", err=True)

    return failures


@click.command()
@click.option("--env-file", default=".env", help="Path to .env file", show_default=True)
@click.option(
    "--prefix",
    default=DEFAULT_PREFIX,
    help="Parameter Store prefix",
    show_default=True,
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be uploaded without uploading"
)
def main(env_file: str, prefix: str, dry_run: bool):
    """
    Upload expense tracker configuration from a .env file to Parameter Store.
    """
    parameters = load_env_file(env_file)

    if not parameters:
        click.secho("No parameters found to upload", fg="red", err=True)
        sys.exit(1)

    click.secho(f"Found {len(parameters)} parameters", fg="green")

    failures = upload_parameters(parameters, prefix.rstrip("/"), dry_run)
    if failures:
        sys.exit(1)

    if not dry_run:
        click.secho("Parameter upload complete!", fg="green")
        click.echo(f"Parameters are now available at prefix: {prefix}")


if __name__ == "__main__":
    main()
