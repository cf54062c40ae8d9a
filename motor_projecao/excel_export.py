"""
Exportação Excel - Motor de Projeção
Uma aba por cenário no layout da tabela anual (trimestres, total e média).
Células fixadas manualmente ficam destacadas em amarelo.
"""

from datetime import datetime
from io import BytesIO
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .config import APP_NAME, APP_SUBTITLE, CATEGORIAS_LABEL, CENARIOS, CENARIOS_LABEL, MESES, RESULTADO
from .logger import get_logger
from .relatorios import ORDEM_TABELA, colunas_tabela, tabela_projecao

logger = get_logger("motor_projecao.excel_export")


class EstilosExcel:
    """Paleta e bordas das planilhas"""

    AZUL_ESCURO = '1F4E79'
    AZUL_MEDIO = '2E75B6'
    VERDE = '70AD47'
    VERMELHO = 'C00000'
    CINZA_ESCURO = '404040'
    CINZA_CLARO = 'D9D9D9'
    BRANCO = 'FFFFFF'
    FUNDO_AZUL = 'DDEBF7'
    FUNDO_AMARELO = 'FFF2CC'

    @classmethod
    def borda_fina(cls):
        return Border(
            left=Side(style='thin', color=cls.CINZA_CLARO),
            right=Side(style='thin', color=cls.CINZA_CLARO),
            top=Side(style='thin', color=cls.CINZA_CLARO),
            bottom=Side(style='thin', color=cls.CINZA_CLARO)
        )

    @classmethod
    def borda_total(cls):
        return Border(
            top=Side(style='medium', color=cls.AZUL_ESCURO),
            bottom=Side(style='double', color=cls.AZUL_ESCURO)
        )


class ExcelProjecaoExporter:
    """Exportador da projeção anual"""

    FORMATO_VALOR = '#,##0.00;(#,##0.00);"-"'
    COL_DESCRICAO = 2
    LINHA_CABECALHO = 4

    def __init__(self, motor):
        self.motor = motor
        self.wb = Workbook()
        self.estilos = EstilosExcel
        self.colunas = colunas_tabela()

    def _aplicar_estilo_cabecalho(self, cell):
        cell.font = Font(name='Calibri', size=10, bold=True, color=self.estilos.BRANCO)
        cell.fill = PatternFill('solid', fgColor=self.estilos.AZUL_MEDIO)
        cell.alignment = Alignment(horizontal='center', vertical='center')
        cell.border = self.estilos.borda_fina()

    def _aplicar_estilo_total(self, cell):
        cell.font = Font(name='Calibri', size=10, bold=True, color=self.estilos.AZUL_ESCURO)
        cell.fill = PatternFill('solid', fgColor=self.estilos.FUNDO_AZUL)
        cell.border = self.estilos.borda_total()

    def _aplicar_estilo_resultado(self, cell, positivo=True):
        cell.font = Font(name='Calibri', size=10, bold=True, color=self.estilos.BRANCO)
        cell.fill = PatternFill('solid', fgColor=self.estilos.VERDE if positivo else self.estilos.VERMELHO)
        cell.border = self.estilos.borda_fina()

    def _aplicar_estilo_fixado(self, cell):
        cell.font = Font(name='Calibri', size=10, bold=True, color=self.estilos.CINZA_ESCURO)
        cell.fill = PatternFill('solid', fgColor=self.estilos.FUNDO_AMARELO)

    def coluna_do_mes(self, mes: int) -> int:
        """Coluna da planilha onde fica o mês (0-11)"""
        return self.COL_DESCRICAO + 1 + self.colunas.index(MESES[mes])

    def _criar_titulo(self, ws, cenario: str):
        col_fim = self.COL_DESCRICAO + len(self.colunas)
        ws.merge_cells(start_row=2, start_column=self.COL_DESCRICAO, end_row=2, end_column=col_fim)
        cell = ws.cell(row=2, column=self.COL_DESCRICAO)
        cell.value = f"{APP_NAME} - Cenário {CENARIOS_LABEL[cenario]}"
        cell.font = Font(name='Calibri', size=12, bold=True, color=self.estilos.BRANCO)
        cell.fill = PatternFill('solid', fgColor=self.estilos.AZUL_ESCURO)
        cell.alignment = Alignment(horizontal='left', vertical='center', indent=1)
        ws.row_dimensions[2].height = 22

        gerado_em = datetime.now().strftime('%d/%m/%Y %H:%M')
        ws.cell(row=3, column=self.COL_DESCRICAO).value = f"{APP_SUBTITLE} | Gerado em {gerado_em}"
        ws.cell(row=3, column=self.COL_DESCRICAO).font = Font(name='Calibri', size=9, italic=True,
                                                            color=self.estilos.CINZA_ESCURO)

    def _criar_cabecalho(self, ws):
        headers = ["DESCRIÇÃO"] + self.colunas
        for i, header in enumerate(headers):
            cell = ws.cell(row=self.LINHA_CABECALHO, column=self.COL_DESCRICAO + i)
            cell.value = header
            self._aplicar_estilo_cabecalho(cell)
        ws.row_dimensions[self.LINHA_CABECALHO].height = 20

    def _escrever_linha(self, ws, row: int, categoria: str, cenario: str, valores: List[float]):
        is_resultado = categoria == RESULTADO

        cell = ws.cell(row=row, column=self.COL_DESCRICAO)
        cell.value = CATEGORIAS_LABEL[categoria]
        cell.border = self.estilos.borda_fina()
        if is_resultado:
            self._aplicar_estilo_resultado(cell, valores[-2] >= 0)
        else:
            cell.font = Font(name='Calibri', size=10, bold=True, color=self.estilos.AZUL_ESCURO)

        for i, (coluna, valor) in enumerate(zip(self.colunas, valores)):
            cell = ws.cell(row=row, column=self.COL_DESCRICAO + 1 + i)
            cell.value = valor
            cell.number_format = self.FORMATO_VALOR
            cell.border = self.estilos.borda_fina()
            cell.alignment = Alignment(horizontal='right')

            if coluna in MESES:
                mes = MESES.index(coluna)
                if self.motor.is_overridden(categoria, cenario, mes):
                    self._aplicar_estilo_fixado(cell)
                elif is_resultado:
                    self._aplicar_estilo_resultado(cell, valor >= 0)
                elif valor < 0:
                    cell.font = Font(name='Calibri', size=10, color=self.estilos.VERMELHO)
            else:
                # colunas de trimestre, total geral e média
                self._aplicar_estilo_total(cell)

        return row + 1

    def _set_larguras(self, ws):
        ws.column_dimensions['A'].width = 2
        ws.column_dimensions[get_column_letter(self.COL_DESCRICAO)].width = 24
        for i in range(len(self.colunas)):
            ws.column_dimensions[get_column_letter(self.COL_DESCRICAO + 1 + i)].width = 13

    def criar_aba(self, cenario: str, primeira: bool = False):
        """Aba de um cenário"""
        if primeira:
            ws = self.wb.active
            ws.title = CENARIOS_LABEL[cenario]
        else:
            ws = self.wb.create_sheet(CENARIOS_LABEL[cenario])
        ws.sheet_view.showGridLines = False
        self._set_larguras(ws)
        self._criar_titulo(ws, cenario)
        self._criar_cabecalho(ws)

        df = tabela_projecao(self.motor, cenario)
        row = self.LINHA_CABECALHO + 1
        for categoria in ORDEM_TABELA:
            valores = df.loc[CATEGORIAS_LABEL[categoria]].tolist()
            row = self._escrever_linha(ws, row, categoria, cenario, valores)

        ws.freeze_panes = ws.cell(row=self.LINHA_CABECALHO + 1, column=self.COL_DESCRICAO + 1)
        return ws

    def generate(self, destino=None):
        """Gera a planilha; sem destino devolve um BytesIO pronto para download"""
        for i, cenario in enumerate(CENARIOS):
            self.criar_aba(cenario, primeira=(i == 0))

        if destino is None:
            destino = BytesIO()
            self.wb.save(destino)
            destino.seek(0)
        else:
            self.wb.save(destino)
        logger.info("[EXPORT] Planilha gerada com %d abas", len(self.wb.sheetnames))
        return destino


def exportar_projecao_excel(motor, destino=None):
    """Função de conveniência"""
    return ExcelProjecaoExporter(motor).generate(destino)
