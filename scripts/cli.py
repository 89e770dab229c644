from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from eks_infra.stacks.aws_stack import describe_plan, plan_stack, select_stack_spec
from eks_infra.modules.eks.eks import cluster_name
from eks_infra.utils.config_loader import load_env_config
from eks_infra.utils.vendor import get_aws_region

from .utils import CmdError, aws_update_kubeconfig, cdktf


def _project(args: argparse.Namespace) -> Path:
    project = Path(args.project_dir)
    if not project.exists():
        raise CmdError(f"Project directory not found: {project}")
    return project


def plan(args: argparse.Namespace) -> None:
    cfg = load_env_config(os.environ)
    stack_plan = plan_stack(select_stack_spec(cfg))
    report = {
        "stack": stack_plan.spec.stack_id,
        "resources": describe_plan(stack_plan),
        "outputs": [o.name for o in stack_plan.outputs],
    }
    print(json.dumps(report, indent=2))


def infra_synth(args: argparse.Namespace) -> None:
    project = _project(args)
    print("Synthesizing CDKTF...")
    cdktf(project, ["get"])  # ensure providers
    cdktf(project, ["synth"])  # generate JSON tf
    print("CDKTF synth completed.")


def infra_deploy(args: argparse.Namespace) -> None:
    project = _project(args)
    print("Synthesizing CDKTF...")
    cdktf(project, ["get"])
    cdktf(project, ["synth"])
    print("Deploying CDKTF...")
    cdktf(project, ["deploy", "--auto-approve"])
    print("CDKTF deploy completed.")


def infra_destroy(args: argparse.Namespace) -> None:
    project = _project(args)
    print("Destroying CDKTF-managed infrastructure...")
    cdktf(project, ["destroy", "--auto-approve"])
    print("Destroy completed.")


def kubeconfig(args: argparse.Namespace) -> None:
    cfg = load_env_config(os.environ)
    name = cluster_name(cfg)
    print(f"Configuring kubectl for {name}...")
    aws_update_kubeconfig(name, get_aws_region(cfg.vendor, cfg.region))


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="eks-infra", description="EKS infrastructure composition CLI"
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    pln = sub.add_parser("plan", help="Print the derived resource plan as JSON")
    pln.set_defaults(func=plan)

    isyn = sub.add_parser("infra-synth", help="Synthesize Terraform JSON via CDKTF")
    isyn.add_argument("--project-dir", default=".")
    isyn.set_defaults(func=infra_synth)

    idep = sub.add_parser("infra-deploy", help="Deploy infrastructure via CDKTF")
    idep.add_argument("--project-dir", default=".")
    idep.set_defaults(func=infra_deploy)

    ides = sub.add_parser("infra-destroy", help="Destroy infrastructure via CDKTF")
    ides.add_argument("--project-dir", default=".")
    ides.set_defaults(func=infra_destroy)

    kcfg = sub.add_parser("kubeconfig", help="Point kubectl at the stack's EKS cluster")
    kcfg.set_defaults(func=kubeconfig)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except (CmdError, ValueError) as ex:
        print(f"Error: {ex}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
