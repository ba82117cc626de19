"""coinlist: ядро загрузки, кеширования и пагинации списка криптовалют."""
