"""Command line interface for the dead link scanner."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from .core.config import API_SCAN, DEAD_LINK_SCAN, load_configuration
from .core.report import CrawlReport
from .recon.crawler import Spider
from .recon.utils import parse_header_pairs

MODES = {"dead-links": DEAD_LINK_SCAN, "api": API_SCAN}


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dead link & API endpoint scanner")
    parser.add_argument("-u", "--url", required=True, help="URL do alvo")
    parser.add_argument("-m", "--mode", choices=sorted(MODES), default="dead-links", help="Função a executar")
    parser.add_argument("-d", "--depth", type=int, default=None, help="Profundidade máxima do crawler")
    parser.add_argument("-p", "--concurrency", type=int, default=None, help="Número de requisições simultâneas")
    parser.add_argument("--delay", type=float, default=None, help="Atraso aleatório máximo (s) entre requisições")
    parser.add_argument("-c", "--cookie", default=None, help="Cookie no formato 'k=v; k2=v2'")
    parser.add_argument("-H", "--headers", type=parse_header_pairs, default=None, help="Headers 'k=v,k2=v2'")
    parser.add_argument("--no-waf", action="store_true", help="Não dispara a página de erro/WAF de referência")
    parser.add_argument("--no-dynamic-scope", action="store_true", help="Não adiciona subdomínios dinamicamente")
    parser.add_argument("--ban-threshold", type=int, default=None, help="Quantidade de 403 antes de checar bloqueio")
    parser.add_argument("--similarity", type=float, default=None, help="Limite de similaridade para soft-404")
    parser.add_argument(
        "--forbidden-policy",
        choices=("html-only", "any"),
        default="html-only",
        help="Quando um 403 em links de scripts conta como quebrado",
    )
    parser.add_argument("--report", default="relatorio_links.json", help="Arquivo de saída do relatório")
    parser.add_argument("-v", "--verbose", action="store_true", help="Exibe logs de depuração")
    return parser.parse_args(argv)


def print_progress(event: str, detail: str) -> None:
    if event == "fetch":
        print(f"[*] Rastreando: {detail}")
    elif event == "scope":
        print(f"[+] Domínio adicionado à lista permitida: {detail}")
    elif event == "ban":
        print(f"[!] IP possivelmente bloqueado, verifique manualmente! Primeira URL 403: {detail}")


def print_report(report: CrawlReport) -> None:
    if report.termination == "invalid-url":
        print("[!] URL inválida, talvez você precise de \"--help\".")
        return
    if report.termination == "unreachable":
        print("[!] Falha na conexão, verifique o link informado.")
        return

    if report.mode == API_SCAN:
        print("\n=== Endpoints de API ===")
        if report.api_endpoints:
            for endpoint in report.api_endpoints:
                print(f" - {endpoint}")
        else:
            print(" - Nenhum endpoint encontrado.")
        return

    print("\n=== Links inválidos ===")
    if report.dead_links:
        for record in report.dead_links:
            print(f" - {record.describe()} [{record.reason}]")
    else:
        print(" - Nenhum link inválido encontrado.")


def run_cli(argv: Optional[Sequence[str]] = None) -> CrawlReport:
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_configuration(
        args.url,
        args.report,
        mode=MODES[args.mode],
        max_depth=args.depth,
        concurrency=args.concurrency,
        delay=args.delay,
        cookie=args.cookie,
        headers=args.headers,
        trigger_waf=not args.no_waf,
        dynamic_scope=not args.no_dynamic_scope,
        ban_threshold=args.ban_threshold,
        similarity_threshold=args.similarity,
        forbidden_policy=args.forbidden_policy,
    )

    spider = Spider(config, progress=print_progress)
    report = spider.run()
    print_report(report)

    report_path = Path(config.report_path)
    report.save(report_path)
    print(f"[+] Relatório salvo em {report_path}")
    return report


def main() -> None:
    run_cli()


if __name__ == "__main__":
    main()
