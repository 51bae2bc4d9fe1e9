# src/infrascope/cli.py
"""InfraScope CLI - resolve a cluster context to its cloud infrastructure."""

import asyncio
import json
import sys
from pathlib import Path
import click
import structlog

from infrascope.clients.gateway import AwsCloudGateway
from infrascope.config.settings import Settings
from infrascope.core.utils import setup_logging
from infrascope.models.resolution import ResolutionState, ResolutionStatus
from infrascope.resolution.orchestrator import ResolutionOrchestrator

logger = structlog.get_logger(__name__)

EXIT_CODES = {
    ResolutionStatus.READY: 0,
    ResolutionStatus.UNAUTHENTICATED: 2,
}


def exit_code_for(state: ResolutionState) -> int:
    return EXIT_CODES.get(state.status, 1)


def build_config(settings: Settings) -> dict:
    return {
        "aws": settings.aws.model_dump(),
        "kubernetes": settings.kubernetes.model_dump(),
        "resolution": settings.resolution.model_dump(),
    }


def echo_state(state: ResolutionState, verbose: bool = False) -> None:
    summary = state.summary()

    if state.status == ResolutionStatus.READY:
        click.echo(f"✅ Resolved {summary['context']} -> {summary['cluster']}")
    elif state.status == ResolutionStatus.UNAUTHENTICATED:
        click.echo(f"🔒 Not authenticated: {summary['error']}")
    else:
        click.echo(f"❌ Resolution failed: {summary['error']}")

    click.echo(f"   📍 Region: {summary['region'] or '-'}")
    click.echo(f"   🔑 Auth: {summary['auth']}" + (f" ({summary['account']})" if summary['account'] else ""))
    click.echo(f"   🌐 VPC: {summary['vpc_id'] or '-'}")
    click.echo(f"   🧱 Subnets: {summary['subnets']}")
    click.echo(f"   🖥️  Instances: {summary['instances']} ({summary['mapped_instances']} mapped to nodes)")
    click.echo(f"   🪪 Workload identity bindings: {summary['workload_identity_bindings']}")

    for category, result in state.partial_failures.items():
        click.echo(f"   ⚠️  {category.value}: {result.error}")

    if verbose and state.cluster:
        click.echo(f"   ☸️  EKS {state.cluster.version or '?'} ({state.cluster.status or 'unknown'})")

    if state.error:
        if state.error.candidates:
            click.echo(f"   Tried: {', '.join(state.error.candidates)}")
        if verbose and state.error.remediations:
            click.echo("   Try: " + ", ".join(r.value for r in state.error.remediations))


@click.group()
def main():
    """InfraScope: map a Kubernetes context to its EKS cluster, VPC and instances."""


@main.command()
@click.argument('context')
@click.option('--retry', is_flag=True, help='Clear cached AWS credentials before resolving')
@click.option('--output', '-o', default=None, help='Write the full resolution state as JSON to this path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def resolve(context, retry, output, verbose, debug):
    """
    Resolve CONTEXT to its region, EKS cluster, VPC, subnets and instances.

    Configure credentials through the usual AWS environment or .env file:
        AWS_PROFILE=your-profile
        K8S_KUBECONFIG_PATH=~/.kube/config

    Exit code is 0 when ready, 2 when not authenticated and 1 on error.

    Example:
        infrascope resolve my-cluster --output state.json
    """

    async def run_resolution():
        settings = Settings.create_from_env()
        log_level = "DEBUG" if debug else settings.log_level.value
        setup_logging(
            config_path=settings.log_config_path,
            log_level=log_level,
            log_format=settings.log_format
        )

        if verbose:
            click.echo(f"🔍 Resolving context: {context}")

        gateway = AwsCloudGateway.from_config(build_config(settings))
        async with gateway:
            orchestrator = ResolutionOrchestrator(gateway, settings.resolution)
            if verbose:
                orchestrator.subscribe(lambda state: click.echo(f"   … {state.status.value}"))

            if retry:
                task = await orchestrator.retry_with_cleared_credentials(context)
                state = await task
            else:
                state = await orchestrator.resolve(context)

        echo_state(state, verbose=verbose)

        if output:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w') as f:
                json.dump(state.model_dump(mode="json"), f, indent=2, default=str)
            click.echo(f"📁 State saved to: {output_path}")

        return exit_code_for(state)

    try:
        exit_code = asyncio.run(run_resolution())
    except Exception as e:
        click.echo(f"❌ Resolution failed: {e}")
        if debug:
            import traceback
            click.echo(traceback.format_exc())
        exit_code = 1
    sys.exit(exit_code)


if __name__ == '__main__':
    main()
