"""Asset Tracker — учёт имущества компании (ноутбуки, мониторы, мебель, транспорт)."""
