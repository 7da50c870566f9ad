# poimap/__init__.py
"""
タイルマップ上の POI マーカー表示と訪問済み管理。

- catalog: カテゴリツリーの選択操作
- visibility: 表示すべきロケーションの導出
- icons: カテゴリ → アイコン
- reconciler: 描画済みマーカーとの差分適用
- visited: 訪問済み状態の保持と永続化
- session: 上記の呼び出し順を束ねる
- visualizer2d: matplotlib によるビューポート / CLI
"""
__version__ = "0.1.0"

__all__ = ["catalog", "visibility", "icons", "reconciler", "visited", "session", "visualizer2d"]
