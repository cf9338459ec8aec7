import argparse
import json
import os
import sys
from typing import Any, Dict

import httpx
import jsonref

from apidoc_client.config import CONFIG_FILE, DEFAULT_DIRNAME, ApidocConfig
from apidoc_client.exceptions import ConfigurationError
from apidoc_client.generator import ApiClientGenerator
from apidoc_client.internal.types.models import Project
from apidoc_client.internal.types.settings import Dialects


def confirm_choice(message: str) -> bool:
    """Запрос подтверждения у пользователя"""
    while True:
        choice = input(f"{message} (y/n): ").lower().strip()
        if choice in ["y", "yes", "да", ""]:
            return True
        elif choice in ["n", "no", "нет"]:
            return False
        print("Введите y/n")


def load_document(url: str) -> Dict[str, Any]:
    """Загрузка JSON описания сервиса из файла или по HTTP"""
    if url.startswith(("http://", "https://")):
        response = httpx.get(url, follow_redirects=True)
        response.raise_for_status()
        document = response.json()
    elif os.path.exists(url):
        with open(url, "r", encoding="utf-8") as f:
            document = json.load(f)
    else:
        raise ValueError(
            f"Не удалось загрузить описание из {url}. Проверьте URL или путь к файлу."
        )

    # Разрешение $ref ссылок
    return jsonref.loads(json.dumps(document), proxies=False)


def _generate_client_core(config: ApidocConfig) -> Project:
    """Ядро генерации клиента - только генерация без сохранения"""
    if not config.url:
        raise ValueError("URL не указан в конфигурации")

    print(f"🚀 Генерация клиента из {config.url}")

    print("📥 Загрузка описания сервиса...")
    document = load_document(config.url)

    print("⚙️ Генерация кода...")
    generator = ApiClientGenerator(
        document,
        source_url=config.url,
        settings=config.settings(),
        dirname=config.dirname,
    )
    return generator.generate()


def _save_project_files(project: Project, target_path: str):
    """Сохранение файлов проекта"""
    print(f"💾 Сохранение {len(project.files)} файлов...")

    for code_model in project.files:
        path = os.path.join(target_path, code_model.file_name)
        os.makedirs(os.path.dirname(path), exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(str(code_model))

    print("✅ Генерация завершена успешно!")
    print(f"📦 Клиент создан в: {os.path.abspath(target_path)}")


def _generate_client(config: ApidocConfig, target_path: str):
    """Генерация клиента; файлы пишутся только после успешной генерации"""
    project = _generate_client_core(config)
    _save_project_files(project, target_path)


def generate():
    """Универсальная команда генерации клиента"""
    parser = argparse.ArgumentParser(description="Генерация Python клиента из описания сервиса")
    parser.add_argument("--url", type=str, help="URL или путь к JSON описанию сервиса")
    parser.add_argument("--dirname", type=str, help="Директория для генерации клиента")
    parser.add_argument(
        "--dialect",
        type=str,
        choices=sorted(Dialects.all()),
        help="Диалект генерируемого клиента",
    )
    parser.add_argument(
        "--init-config", action="store_true", help=f"Создать конфиг файл {CONFIG_FILE}"
    )
    parser.add_argument(
        "--force", action="store_true", help="Генерировать без подтверждения"
    )

    args = parser.parse_args()

    # Инициализация конфига
    if args.init_config:
        config = ApidocConfig(
            url=args.url,
            dirname=args.dirname or DEFAULT_DIRNAME,
            dialect=args.dialect or Dialects.AIOHTTP.name,
        )
        config.save_to_file()
        print(f"✅ Создан конфиг файл {CONFIG_FILE}")
        return

    # Загрузка конфига из файла
    file_config = ApidocConfig.from_file(search_dir=args.dirname)

    # Определение финальной конфигурации
    if file_config and (args.url or args.dialect):
        print(f"🔧 Найден конфиг файл {CONFIG_FILE}:")
        print(f"   URL: {file_config.url}")
        print(f"   Директория: {file_config.dirname}")
        print(f"   Диалект: {file_config.dialect}")
        print()

        if args.force or confirm_choice("Использовать конфиг из файла?"):
            final_config = file_config
        else:
            final_config = file_config.merge_with_args(args)
    elif file_config:
        print(f"📋 Используется конфиг из {CONFIG_FILE}")
        final_config = file_config.merge_with_args(args)
    elif args.url:
        final_config = ApidocConfig(
            url=args.url,
            dirname=args.dirname or DEFAULT_DIRNAME,
            dialect=args.dialect or Dialects.AIOHTTP.name,
        )
    else:
        print("❌ Ошибка: Укажите URL или создайте конфиг с --init-config")
        sys.exit(1)

    if not final_config.url:
        print("❌ Ошибка: URL не указан ни в конфиге, ни в аргументах")
        sys.exit(1)

    work_path = final_config.dirname or DEFAULT_DIRNAME
    print(f"📁 Генерация в папку: {work_path}")

    try:
        _generate_client(final_config, work_path)
    except ConfigurationError as e:
        print(f"❌ Ошибка в описании сервиса: {e}")
        sys.exit(1)
    except (ValueError, OSError, httpx.HTTPError) as e:
        print(f"❌ Ошибка генерации: {e}")
        sys.exit(1)


if __name__ == "__main__":
    generate()
