from __future__ import annotations

from pathlib import Path

import pytest

from production_report.config import Settings

SAMPLE_CSV = (
    "Цех,Месяц,Выпуск,Брак,Простой,ВаловаяПрибыль,ЧистаяПрибыль,Маржинальность,Рентабельность\n"
    "1,Янв,100,2,5,50,30,10,5\n"
    "1,Фев,200,4,10,70,40,20,15\n"
    "1,Апр,150,3,6,60,35,30,25\n"
    "2,Янв,80,1,2,20,10,5,2\n"
    "3,Мар,0,9,9,9,9,9,9\n"
)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        workshops_count=20,
        cache_path=tmp_path / "cache" / "report_cache.json",
        output_dir=tmp_path / "reports",
        feed_url=None,
        http_timeout=5.0,
        pdf_font_path=None,
        log_path=tmp_path / "logs" / "report.log",
    )


@pytest.fixture()
def sample_csv() -> str:
    return SAMPLE_CSV
